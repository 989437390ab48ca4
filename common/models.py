"""Shared models for the studio API."""
from enum import Enum
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Style(str, Enum):
    """Aesthetic categories offered for generation. The first member is the default."""
    ANIME = "anime"
    PHOTOREALISTIC = "photorealistic"
    FUTURISTIC = "futuristic"
    FANTASY = "fantasy"
    CYBERPUNK = "cyberpunk"
    STEAMPUNK = "steampunk"
    CARTOON = "cartoon"
    ABSTRACT = "abstract"
    WATERCOLOR = "watercolor"
    PIXEL_ART = "pixel art"
    RENDER_3D = "3d render"
    IMPRESSIONISTIC = "impressionistic"


STYLE_LABELS: Dict[Style, str] = {
    Style.ANIME: "Anime",
    Style.PHOTOREALISTIC: "Photorealistic",
    Style.FUTURISTIC: "Futuristic",
    Style.FANTASY: "Fantasy",
    Style.CYBERPUNK: "Cyberpunk",
    Style.STEAMPUNK: "Steampunk",
    Style.CARTOON: "Cartoon",
    Style.ABSTRACT: "Abstract",
    Style.WATERCOLOR: "Watercolor",
    Style.PIXEL_ART: "Pixel Art",
    Style.RENDER_3D: "3D Render",
    Style.IMPRESSIONISTIC: "Impressionistic",
}

DEFAULT_STYLE = list(Style)[0]


class AspectRatio(str, Enum):
    """Supported output aspect ratios."""
    SQUARE = "1:1"
    PORTRAIT_9_16 = "9:16"
    LANDSCAPE_16_9 = "16:9"
    PORTRAIT_2_3 = "2:3"
    LANDSCAPE_3_2 = "3:2"


ASPECT_RATIO_LABELS: Dict[AspectRatio, str] = {
    AspectRatio.SQUARE: "Square (1:1)",
    AspectRatio.PORTRAIT_9_16: "Portrait (9:16)",
    AspectRatio.LANDSCAPE_16_9: "Landscape (16:9)",
    AspectRatio.PORTRAIT_2_3: "Portrait (2:3)",
    AspectRatio.LANDSCAPE_3_2: "Landscape (3:2)",
}


class ReferenceImage(BaseModel):
    """Reference image in inline transport form."""
    model_config = ConfigDict(frozen=True)

    mime_type: str = Field(..., description="Image MIME type (e.g., image/png, image/jpeg)")
    data: str = Field(..., min_length=1, description="Base64-encoded image data")

    @field_validator("mime_type")
    @classmethod
    def _must_be_image(cls, value: str) -> str:
        if not value.startswith("image/"):
            raise ValueError("mime_type must start with 'image/'")
        return value
