"""Media ingestion module."""
from media.models import ImagePreview, IngestedBatch
from media.services import (
    decode_reference,
    encode_reference,
    ingest_batch,
    preview_data_url,
)

__all__ = [
    "ImagePreview",
    "IngestedBatch",
    "decode_reference",
    "encode_reference",
    "ingest_batch",
    "preview_data_url",
]
