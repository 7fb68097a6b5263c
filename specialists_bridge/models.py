from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import AnyUrl, BaseModel, Field, TypeAdapter, ValidationError, field_validator

_URL_ADAPTER = TypeAdapter(AnyUrl)

ImageDetail = Literal["auto", "low", "high"]


class ToolInput(BaseModel):
    prompt: str = Field(..., min_length=1, description="User request / content to send to the assistant")
    context: Optional[str] = Field(None, description="Optional extra context (constraints, acceptance criteria, etc.)")
    files: Optional[List[str]] = Field(
        None, description="Local file paths to upload and add to file_search for this specialist"
    )
    image_urls: Optional[List[str]] = Field(
        None, description="Image URLs to include in the message for visual analysis (e.g., screenshots, design mockups)"
    )
    image_files: Optional[List[str]] = Field(
        None,
        description="Local image file paths to upload for visual analysis. Supported formats: PNG, JPG, JPEG, GIF, WEBP",
    )
    image_base64: Optional[List[str]] = Field(
        None, description="Base64-encoded image data for visual analysis (without the data:image/... prefix)"
    )
    image_detail: ImageDetail = Field(
        "auto",
        description="Detail level for image analysis: 'auto' (default), 'low' (faster/cheaper), or 'high' (more detailed)",
    )
    reset_thread: bool = Field(False, description="If true, start a fresh thread for this tool")
    reset_files: bool = Field(
        False, description="If true, start a fresh vector store for this tool (clears its file_search corpus)"
    )

    @field_validator("image_urls")
    @classmethod
    def _check_urls(cls, urls: Optional[List[str]]) -> Optional[List[str]]:
        # validated as URLs, forwarded exactly as given
        for url in urls or []:
            try:
                _URL_ADAPTER.validate_python(url)
            except ValidationError:
                raise ValueError(f"invalid image URL: {url!r}") from None
        return urls

    def image_url_strings(self) -> List[str]:
        return list(self.image_urls or [])

    @property
    def total_image_count(self) -> int:
        return len(self.image_urls or []) + len(self.image_files or []) + len(self.image_base64 or [])

    @classmethod
    def describe(cls, field_name: str) -> Optional[str]:
        return cls.model_fields[field_name].description
