"""Image generation Pydantic models."""
from typing import Annotated, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from config import Config
from common.error_messages import ErrorCode
from common.models import AspectRatio, DEFAULT_STYLE, ReferenceImage, Style


class GenerationRequest(BaseModel):
    """One submission from the studio form."""
    model_config = ConfigDict(frozen=True)

    prompt: str = Field("", description="Free-text prompt; may be empty when reference images are given")
    style: Style = Field(DEFAULT_STYLE, description="Style tag")
    reference_images: List[ReferenceImage] = Field(
        default_factory=list,
        max_length=Config.MAX_REFERENCE_IMAGES,
        description="Up to five reference images used to steer the prompt"
    )
    image_count: int = Field(1, ge=1, le=Config.MAX_IMAGE_COUNT, description="Number of images to generate")
    aspect_ratio: AspectRatio = Field(AspectRatio.SQUARE, description="Requested aspect ratio")

    def has_content(self) -> bool:
        """True when there is either prompt text or a reference image to work from."""
        return bool(self.prompt.strip()) or bool(self.reference_images)


class GeneratedImage(BaseModel):
    """A generated image ready for display and download."""
    mime_type: str
    data_url: str
    filename: str = Field(..., description="Suggested download file name")


class IdleState(BaseModel):
    phase: Literal["idle"] = "idle"


class DescribingState(BaseModel):
    phase: Literal["describing"] = "describing"


class SynthesizingState(BaseModel):
    phase: Literal["synthesizing"] = "synthesizing"


class SucceededState(BaseModel):
    phase: Literal["succeeded"] = "succeeded"
    style: Style
    images: List[GeneratedImage] = Field(..., min_length=1)


class FailedState(BaseModel):
    phase: Literal["failed"] = "failed"
    error: str
    error_code: ErrorCode


GenerationState = Annotated[
    Union[IdleState, DescribingState, SynthesizingState, SucceededState, FailedState],
    Field(discriminator="phase"),
]

ACTIVE_PHASES = ("describing", "synthesizing")
