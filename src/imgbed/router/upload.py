"""Router – image upload."""

from fastapi import APIRouter, Depends, Request
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from src.imgbed.config import UPLOADS_URL_PREFIX, Settings
from src.imgbed.dependencies import get_settings, require_api_key
from src.imgbed.exceptions import NoFileUploaded
from src.imgbed.schemas.upload import UploadResponse
from src.imgbed.services.storage_service import save_upload, validate_mime_type

router = APIRouter(prefix="/api", tags=["Upload"])

FILE_FIELD = "file"


# No body parameter is declared, so the body is only read after
# ``require_api_key`` has passed.
@router.post(
    "/upload",
    response_model=UploadResponse,
    dependencies=[Depends(require_api_key)],
)
async def upload_image(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> UploadResponse:
    """
    Store one image and return its public URL.

    Expects a multipart body with field ``file`` (jpeg, png, gif or webp,
    at most ``MAX_UPLOAD_SIZE`` bytes).

    Returns
    -------
    UploadResponse with ``success`` and ``imgUrl``.
    """
    try:
        form = await request.form()
    except (StarletteHTTPException, MultiPartException) as exc:
        # Unparseable multipart (missing boundary, truncated body, ...).
        raise NoFileUploaded() from exc

    try:
        file = form.get(FILE_FIELD)
        if not isinstance(file, UploadFile):
            raise NoFileUploaded()

        # ── validate declared type before touching disk ──
        validate_mime_type(file.content_type, settings.allowed_mime_types_set)

        # ── save with generated name ──
        filename = await save_upload(file, settings.upload_dir, settings.max_upload_size)
    finally:
        await form.close()

    img_url = f"{settings.public_base_url}{UPLOADS_URL_PREFIX}/{filename}"
    return UploadResponse(img_url=img_url)
