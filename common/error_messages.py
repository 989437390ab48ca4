"""
User-facing error messages, status codes and upstream error classification.

Every failure the studio can report is an ``ErrorCode``. Services raise
``StudioError`` carrying a code and optional details; the HTTP layer turns
it into a JSON error with the status code from ``ERROR_STATUS_CODES``.

Upstream (Gemini / Imagen) failures only expose free-form text, so they are
classified by substring rules. The rules for each pipeline step live in one
table each and are evaluated by ``classify_error``.
"""
from enum import Enum
from typing import NamedTuple, Optional, Sequence, Tuple


class ErrorCode(str, Enum):
    """Error codes for different types of failures."""

    # Configuration Errors
    MISSING_API_KEY = "MISSING_API_KEY"

    # Validation Errors
    INVALID_INPUT = "INVALID_INPUT"
    UNSUPPORTED_MEDIA = "UNSUPPORTED_MEDIA"
    PREVIEW_FAILED = "PREVIEW_FAILED"

    # Description Errors
    REFERENCE_IMAGES_UNSUPPORTED = "REFERENCE_IMAGES_UNSUPPORTED"
    REFERENCE_PROCESSING_FAILED = "REFERENCE_PROCESSING_FAILED"

    # Synthesis Errors
    INVALID_API_KEY = "INVALID_API_KEY"
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
    SYNTHESIS_FAILED = "SYNTHESIS_FAILED"

    # Malformed Response Errors
    NO_IMAGE_DATA = "NO_IMAGE_DATA"
    IMAGE_DATA_MISSING = "IMAGE_DATA_MISSING"

    # Session Errors
    GENERATION_IN_PROGRESS = "GENERATION_IN_PROGRESS"
    IMAGE_NOT_FOUND = "IMAGE_NOT_FOUND"

    # Generic Errors
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


# Message templates; "{details}" is filled with the upstream error text
ERROR_MESSAGES = {
    ErrorCode.MISSING_API_KEY: "GEMINI_API_KEY is not configured. Please set the GEMINI_API_KEY environment variable.",

    ErrorCode.INVALID_INPUT: "Please enter a prompt or upload at least one image.",
    ErrorCode.UNSUPPORTED_MEDIA: "Please upload only valid image files (e.g., JPG, PNG, WEBP).",
    ErrorCode.PREVIEW_FAILED: "Could not generate image preview for one or more files.",

    ErrorCode.REFERENCE_IMAGES_UNSUPPORTED: (
        "Failed to process one or more reference images. An image format might be unsupported "
        "or corrupted. Try different images (e.g. PNG, JPG). Details: {details}"
    ),
    ErrorCode.REFERENCE_PROCESSING_FAILED: "Failed to process reference images: {details}",

    ErrorCode.INVALID_API_KEY: (
        "Invalid API Key or insufficient permissions for Imagen. "
        "Please check your Google AI Studio configuration."
    ),
    ErrorCode.QUOTA_EXCEEDED: "Imagen API quota exceeded. Please check your usage limits.",
    ErrorCode.SYNTHESIS_FAILED: "Imagen API request failed: {details}",

    ErrorCode.NO_IMAGE_DATA: "No image data received from Imagen API. The response might be empty or malformed.",
    ErrorCode.IMAGE_DATA_MISSING: "Image data missing in one of the generated images.",

    ErrorCode.GENERATION_IN_PROGRESS: "A generation is already in progress. Please wait for it to finish.",
    ErrorCode.IMAGE_NOT_FOUND: "There is no generated image at that position.",

    ErrorCode.UNKNOWN_ERROR: "Something unexpected happened. Please try again.",
}


# HTTP status codes for each error type
ERROR_STATUS_CODES = {
    ErrorCode.MISSING_API_KEY: 500,

    ErrorCode.INVALID_INPUT: 400,
    ErrorCode.UNSUPPORTED_MEDIA: 400,
    ErrorCode.PREVIEW_FAILED: 400,

    ErrorCode.REFERENCE_IMAGES_UNSUPPORTED: 400,
    ErrorCode.REFERENCE_PROCESSING_FAILED: 502,

    ErrorCode.INVALID_API_KEY: 502,
    ErrorCode.QUOTA_EXCEEDED: 429,
    ErrorCode.SYNTHESIS_FAILED: 502,

    ErrorCode.NO_IMAGE_DATA: 502,
    ErrorCode.IMAGE_DATA_MISSING: 502,

    ErrorCode.GENERATION_IN_PROGRESS: 409,
    ErrorCode.IMAGE_NOT_FOUND: 404,

    ErrorCode.UNKNOWN_ERROR: 500,
}


def format_error_message(error_code: ErrorCode, details: Optional[str] = None) -> str:
    """Render the message template for an error code."""
    template = ERROR_MESSAGES.get(error_code, ERROR_MESSAGES[ErrorCode.UNKNOWN_ERROR])
    return template.format(details=details or "unknown error")


def get_error_response(error_code: ErrorCode, details: Optional[str] = None) -> Tuple[str, int]:
    """
    Get user-friendly error message and HTTP status code.

    Args:
        error_code: The error code enum
        details: Optional upstream details for templates that embed them

    Returns:
        Tuple of (error_message, status_code)
    """
    return format_error_message(error_code, details), ERROR_STATUS_CODES.get(error_code, 500)


class StudioError(Exception):
    """A classified, user-presentable failure."""

    def __init__(self, code: ErrorCode, details: Optional[str] = None):
        self.code = code
        self.details = details
        self.message = format_error_message(code, details)
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return ERROR_STATUS_CODES.get(self.code, 500)


class ErrorRule(NamedTuple):
    """Substring rule mapping upstream error text to an error code.

    A rule matches when every ``all_of`` needle is present and, if
    ``any_of`` is given, at least one of its needles is present.
    """
    code: ErrorCode
    any_of: Tuple[str, ...] = ()
    all_of: Tuple[str, ...] = ()
    ignore_case: bool = False

    def matches(self, text: str) -> bool:
        haystack = text.lower() if self.ignore_case else text

        def _norm(needle: str) -> str:
            return needle.lower() if self.ignore_case else needle

        if not all(_norm(n) in haystack for n in self.all_of):
            return False
        if self.any_of and not any(_norm(n) in haystack for n in self.any_of):
            return False
        return bool(self.all_of or self.any_of)


DESCRIPTION_ERROR_RULES: Sequence[ErrorRule] = (
    ErrorRule(ErrorCode.REFERENCE_IMAGES_UNSUPPORTED, all_of=("400", "image"), ignore_case=True),
)

SYNTHESIS_ERROR_RULES: Sequence[ErrorRule] = (
    ErrorRule(ErrorCode.INVALID_API_KEY, any_of=("API_KEY_INVALID", "PERMISSION_DENIED")),
    ErrorRule(ErrorCode.QUOTA_EXCEEDED, any_of=("exhausted", "quota"), ignore_case=True),
)


def classify_error(rules: Sequence[ErrorRule], fallback: ErrorCode, error_text: str) -> StudioError:
    """Return a StudioError for the first rule matching error_text, else the fallback."""
    for rule in rules:
        if rule.matches(error_text):
            return StudioError(rule.code, error_text)
    return StudioError(fallback, error_text)
