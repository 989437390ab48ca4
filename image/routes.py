"""Image generation routes."""
from typing import Optional

from fastapi import APIRouter, Depends, Path, Request, Response

from image.client import StudioClient
from image.models import GenerationRequest, GenerationState, SucceededState
from image.services import decode_data_url
from image.session import GenerationSession
from utils.logger import get_logger

logger = get_logger("image")
router = APIRouter(prefix="/api", tags=["image"])


def get_studio_client(request: Request) -> Optional[StudioClient]:
    """StudioClient built at startup, or None when the API key is missing."""
    return request.app.state.studio_client


def get_session(request: Request) -> GenerationSession:
    return request.app.state.session


@router.post("/generate", response_model=SucceededState)
def generate(
    req: GenerationRequest,
    client: Optional[StudioClient] = Depends(get_studio_client),
    session: GenerationSession = Depends(get_session),
):
    """
    Generate images from a prompt and/or reference images.

    Accepts:
      { prompt, style, reference_images: [{mime_type, data}], image_count, aspect_ratio }

    Behavior:
      - rejects an empty prompt without images before any API call
      - describes reference images first, when there are any
      - returns every generated image as a data URL, or a single error
    """
    logger.info(
        f"Generation requested: style={req.style.value}, ratio={req.aspect_ratio.value}, "
        f"count={req.image_count}, references={len(req.reference_images)}"
    )
    return session.submit(client, req)


@router.get("/generate/state", response_model=GenerationState)
def generation_state(session: GenerationSession = Depends(get_session)):
    """Current phase plus the latest result or error."""
    return session.state


@router.get("/images/{index}")
def download_image(index: int = Path(..., ge=1), session: GenerationSession = Depends(get_session)):
    """Download the index-th (1-based) image of the latest successful run."""
    image = session.image(index)
    return Response(
        content=decode_data_url(image.data_url),
        media_type=image.mime_type,
        headers={"Content-Disposition": f'attachment; filename="{image.filename}"'},
    )
