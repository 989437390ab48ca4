"""Media ingestion routes."""
from typing import List

from fastapi import APIRouter, File, Form, UploadFile

from media.models import IngestedBatch
from media.services import ingest_batch

router = APIRouter(prefix="/api/media", tags=["media"])


@router.post("/ingest", response_model=IngestedBatch)
async def ingest(files: List[UploadFile] = File(...), selected_count: int = Form(0)):
    """
    Convert uploaded images into inline references and previews.

    ``selected_count`` is how many references the client already holds;
    files past the five-image limit are dropped from the end of the batch.
    Rejections surface as StudioError and are rendered by the app handler.
    """
    return await ingest_batch(files, already_selected=selected_count)
