"""Studio configuration endpoint."""
from fastapi import APIRouter, Request

from config import Config
from common.models import ASPECT_RATIO_LABELS, STYLE_LABELS, AspectRatio, DEFAULT_STYLE, Style

router = APIRouter(prefix="/api", tags=["config"])


@router.get("/config")
def studio_config(request: Request):
    """
    Options for the studio form and the service configuration status.

    ``error`` stays set for the lifetime of the process when the API key
    is missing; generation requests fail until it is configured.
    """
    config_error = request.app.state.config_error
    return {
        "configured": config_error is None,
        "error": config_error,
        "styles": [{"value": s.value, "label": STYLE_LABELS[s]} for s in Style],
        "default_style": DEFAULT_STYLE.value,
        "aspect_ratios": [{"value": r.value, "label": ASPECT_RATIO_LABELS[r]} for r in AspectRatio],
        "default_aspect_ratio": AspectRatio.SQUARE.value,
        "max_reference_images": Config.MAX_REFERENCE_IMAGES,
        "max_image_count": Config.MAX_IMAGE_COUNT,
    }
