"""Error taxonomy – every failure a client can see.

Each class carries the HTTP status and the message placed in the
``{"success": false, "message": ...}`` envelope by the handlers in
``src.imgbed.main``.
"""

from __future__ import annotations

NOT_FOUND_MESSAGE = "接口不存在"
INTERNAL_ERROR_MESSAGE = "服务器内部错误"


class RelayError(Exception):
    """Base class for errors that map onto a JSON error envelope."""

    status_code: int = 500
    message: str = INTERNAL_ERROR_MESSAGE

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


# ── authentication (401) ──
class AuthError(RelayError):
    status_code = 401


class MissingCredentials(AuthError):
    message = "缺少认证信息"


class MalformedCredentials(AuthError):
    message = "认证格式错误"


class InvalidCredentials(AuthError):
    message = "无效的 API 密钥"


# ── validation (400) ──
class UploadValidationError(RelayError):
    status_code = 400


class NoFileUploaded(UploadValidationError):
    message = "没有文件被上传"


class UnsupportedFileType(UploadValidationError):
    message = "不支持的文件类型"


class FileTooLarge(UploadValidationError):
    def __init__(self, max_size_mb: int) -> None:
        super().__init__(f"文件大小超出限制（最大 {max_size_mb}MB）")
