"""Image generation services - describe, assemble and synthesize."""
import base64
from typing import Any, Callable, List, Optional

from common.error_messages import (
    DESCRIPTION_ERROR_RULES,
    SYNTHESIS_ERROR_RULES,
    ErrorCode,
    StudioError,
    classify_error,
)
from common.models import Style
from image.client import OUTPUT_MIME_TYPE
from image.models import GeneratedImage, GenerationRequest
from image.prompts import (
    assemble_final_prompt,
    describer_system_instruction,
    describer_text_part,
    resolve_effective_prompt,
)
from media.services import decode_reference
from utils.logger import get_logger

logger = get_logger("image.services")

PhaseCallback = Callable[[str], None]


def download_filename(style: Style, index: int) -> str:
    """Download name for the index-th (1-based) image of a run."""
    style_text = style.value if isinstance(style, Style) else str(style)
    extension = OUTPUT_MIME_TYPE.split("/", 1)[1]
    return f"generated_{style_text}_image_{index}.{extension}"


def validate_request(client: Optional[Any], request: GenerationRequest) -> None:
    """Reject a run before any network call is made."""
    if client is None:
        raise StudioError(ErrorCode.MISSING_API_KEY)
    if not request.has_content():
        raise StudioError(ErrorCode.INVALID_INPUT)


def describe_reference_images(client: Any, request: GenerationRequest) -> str:
    """
    Turn the reference images (plus the user prompt) into a generation prompt.

    Returns:
        The trimmed description, or "" when the model returned nothing

    Raises:
        StudioError: REFERENCE_IMAGES_UNSUPPORTED or REFERENCE_PROCESSING_FAILED
    """
    images = [(decode_reference(ref), ref.mime_type) for ref in request.reference_images]
    count = len(images)
    try:
        text = client.describe_images(
            images,
            instruction=describer_text_part(request.style, request.prompt, count),
            system_instruction=describer_system_instruction(request.style, request.prompt, count),
        )
    except Exception as e:
        logger.error(f"Error getting description for reference images: {e}")
        raise classify_error(DESCRIPTION_ERROR_RULES, ErrorCode.REFERENCE_PROCESSING_FAILED, str(e)) from e

    described = (text or "").strip()
    if not described:
        logger.warning("Description model returned no prompt; falling back to user prompt")
    else:
        logger.debug(f"Described prompt: {described[:100]}...")
    return described


def synthesize_images(client: Any, final_prompt: str, image_count: int) -> List[str]:
    """
    Generate images and return them as data URLs, in response order.

    A response with no images, or with any entry lacking bytes, fails the
    whole call.
    """
    try:
        generated = client.generate_images(final_prompt, image_count)
    except Exception as e:
        logger.error(f"Imagen API error: {e}")
        raise classify_error(SYNTHESIS_ERROR_RULES, ErrorCode.SYNTHESIS_FAILED, str(e)) from e

    if not generated:
        logger.error("Imagen returned no images")
        raise StudioError(ErrorCode.NO_IMAGE_DATA)

    urls = []
    for idx, entry in enumerate(generated):
        image = getattr(entry, "image", None)
        image_bytes = getattr(image, "image_bytes", None)
        if not image_bytes:
            logger.error(f"Generated image {idx + 1} of {len(generated)} is missing its bytes")
            raise StudioError(ErrorCode.IMAGE_DATA_MISSING)
        urls.append(f"data:{OUTPUT_MIME_TYPE};base64,{base64.b64encode(image_bytes).decode('ascii')}")
    return urls


def generate_images(
    client: Any,
    request: GenerationRequest,
    on_phase: Optional[PhaseCallback] = None,
) -> List[GeneratedImage]:
    """
    Run the full pipeline for one request.

    Args:
        client: StudioClient (or None when the API key is missing)
        request: The submission
        on_phase: Called with "describing" / "synthesizing" as the run advances

    Returns:
        Generated images in response order
    """
    validate_request(client, request)

    described = ""
    if request.reference_images:
        if on_phase:
            on_phase("describing")
        described = describe_reference_images(client, request)

    effective = resolve_effective_prompt(described, request.prompt, bool(request.reference_images), request.style)
    final_prompt = assemble_final_prompt(effective, request.style, request.aspect_ratio)
    logger.info(f"Final prompt ({len(final_prompt)} chars): {final_prompt[:120]}...")

    if on_phase:
        on_phase("synthesizing")
    urls = synthesize_images(client, final_prompt, request.image_count)

    logger.info(f"Generated {len(urls)} image(s) in {request.style.value} style")
    return [
        GeneratedImage(mime_type=OUTPUT_MIME_TYPE, data_url=url, filename=download_filename(request.style, i))
        for i, url in enumerate(urls, start=1)
    ]


def decode_data_url(data_url: str) -> bytes:
    """Payload bytes of a base64 data URL."""
    return base64.b64decode(data_url.split(",", 1)[1])
