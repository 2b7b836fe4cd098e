"""Router – health check."""

from fastapi import APIRouter

from src.imgbed.schemas.common import StatusResponse

router = APIRouter(tags=["Health"])

HEALTH_MESSAGE = "PicGo 图床服务正在运行"


@router.get("/", response_model=StatusResponse)
def health_check() -> StatusResponse:
    """Liveness check; touches neither disk nor configuration."""
    return StatusResponse(success=True, message=HEALTH_MESSAGE)
