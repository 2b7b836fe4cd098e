from pydantic import BaseModel


class StatusResponse(BaseModel):
    """Envelope for GET / and for every error response."""
    success: bool
    message: str
