"""FastAPI dependencies shared by the routers."""

from fastapi import Depends, Header, Request

from src.imgbed.config import Settings
from src.imgbed.services.auth_service import verify_bearer


def get_settings(request: Request) -> Settings:
    """Settings the running application was built with."""
    return request.app.state.settings


def require_api_key(
    request: Request,
    authorization: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Reject the request unless it carries ``Authorization: Bearer <API_KEY>``."""
    verify_bearer(
        authorization,
        settings.api_key,
        method=request.method,
        path=request.url.path,
    )
