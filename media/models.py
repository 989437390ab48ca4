"""Media ingestion Pydantic models."""
from typing import List

from pydantic import BaseModel, Field

from common.models import ReferenceImage


class ImagePreview(BaseModel):
    """Display form of an uploaded image."""
    filename: str = Field("", description="Original file name")
    data_url: str = Field(..., description="data:<mime>;base64,<payload> string for rendering")


class IngestedBatch(BaseModel):
    """Result of ingesting one batch of uploaded files.

    ``references[i]`` and ``previews[i]`` always describe the same file.
    """
    references: List[ReferenceImage] = Field(default_factory=list)
    previews: List[ImagePreview] = Field(default_factory=list)
    truncated: bool = Field(False, description="Whether files beyond the selection limit were dropped")
    selected_count: int = Field(0, description="Selection size after adding this batch")
    can_add_more: bool = Field(True, description="Whether another image may still be added")
