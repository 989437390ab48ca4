"""Image generation module."""
from image.client import StudioClient
from image.models import GeneratedImage, GenerationRequest, GenerationState
from image.services import generate_images
from image.session import GenerationSession

__all__ = [
    "StudioClient",
    "GeneratedImage",
    "GenerationRequest",
    "GenerationState",
    "generate_images",
    "GenerationSession",
]
