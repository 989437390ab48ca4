"""Media ingestion services - uploaded files to inline references and previews."""
import asyncio
import base64
import binascii
from typing import Any, Sequence

from config import Config
from common.error_messages import ErrorCode, StudioError
from common.models import ReferenceImage
from media.models import ImagePreview, IngestedBatch
from utils.logger import get_logger

logger = get_logger("media.services")


def encode_reference(content_type: str, data: bytes) -> ReferenceImage:
    """Encode raw image bytes for inline transport."""
    return ReferenceImage(mime_type=content_type, data=base64.b64encode(data).decode("ascii"))


def preview_data_url(content_type: str, data: bytes) -> str:
    """Build a data URL suitable for an <img> src."""
    return f"data:{content_type};base64,{base64.b64encode(data).decode('ascii')}"


def decode_reference(reference: ReferenceImage) -> bytes:
    """Decode a reference image payload back to bytes."""
    try:
        return base64.b64decode(reference.data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise StudioError(ErrorCode.UNSUPPORTED_MEDIA, f"invalid base64 payload: {e}")


async def ingest_batch(files: Sequence[Any], already_selected: int = 0) -> IngestedBatch:
    """
    Ingest a batch of uploaded files.

    Each file must expose ``filename``, ``content_type`` and an awaitable
    ``read()`` (FastAPI's ``UploadFile`` does). The batch is all-or-nothing:
    a non-image file or an unreadable file rejects every file in it.

    Args:
        files: Uploaded files in selection order
        already_selected: Number of references the caller already holds

    Returns:
        IngestedBatch with matching references and previews

    Raises:
        StudioError: UNSUPPORTED_MEDIA or PREVIEW_FAILED
    """
    limit = Config.MAX_REFERENCE_IMAGES
    already_selected = max(0, min(already_selected, limit))

    for upload in files:
        content_type = upload.content_type or ""
        if not content_type.startswith("image/"):
            logger.warning(f"Rejected upload batch: {upload.filename!r} has type {content_type!r}")
            raise StudioError(ErrorCode.UNSUPPORTED_MEDIA)

    remaining = limit - already_selected
    kept = list(files)[:remaining]
    truncated = len(files) > len(kept)
    if truncated:
        logger.info(f"Keeping {len(kept)} of {len(files)} uploaded files (limit {limit})")

    try:
        payloads = await asyncio.gather(*(upload.read() for upload in kept))
    except Exception as e:
        logger.error(f"Failed to read uploaded image: {e}")
        raise StudioError(ErrorCode.PREVIEW_FAILED, str(e))

    references = []
    previews = []
    for upload, data in zip(kept, payloads):
        if not data:
            logger.error(f"Uploaded image {upload.filename!r} is empty")
            raise StudioError(ErrorCode.PREVIEW_FAILED, f"{upload.filename} is empty")
        references.append(encode_reference(upload.content_type, data))
        previews.append(ImagePreview(filename=upload.filename or "", data_url=preview_data_url(upload.content_type, data)))

    selected_count = already_selected + len(references)
    logger.info(f"Ingested {len(references)} image(s), selection now {selected_count}/{limit}")
    return IngestedBatch(
        references=references,
        previews=previews,
        truncated=truncated,
        selected_count=selected_count,
        can_add_more=selected_count < limit,
    )
