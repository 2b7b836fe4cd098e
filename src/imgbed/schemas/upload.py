from pydantic import BaseModel, ConfigDict, Field


class UploadResponse(BaseModel):
    """Response schema for POST /api/upload."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    img_url: str = Field(alias="imgUrl")
