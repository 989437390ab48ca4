"""
Prompt templates for the describe and synthesize steps.

Everything here is pure string work: the same inputs always give the
same prompt, and ``normalize_prompt`` is idempotent.
"""
import re
from typing import Union

from common.models import AspectRatio, Style

StyleLike = Union[Style, str]
AspectRatioLike = Union[AspectRatio, str]

QUALITY_SUFFIX = (
    "Evocative lighting, sharp focus, masterpiece quality, high resolution, "
    "vibrant colors, intricate details."
)

ASPECT_RATIO_CLAUSES = {
    AspectRatio.SQUARE.value: "Rendered in a square aspect ratio.",
    AspectRatio.PORTRAIT_9_16.value: "Rendered in a portrait aspect ratio (9:16).",
    AspectRatio.LANDSCAPE_16_9.value: "Rendered in a landscape aspect ratio (16:9).",
    AspectRatio.PORTRAIT_2_3.value: "Rendered in a portrait aspect ratio (2:3).",
    AspectRatio.LANDSCAPE_3_2.value: "Rendered in a landscape aspect ratio (3:2).",
}

_WHITESPACE_RUN = re.compile(r"\s{2,}")
_SPACE_BEFORE_PERIOD = re.compile(r"\s+\.")
_PERIOD_RUN = re.compile(r"\.{2,}")


def _text(value: Union[Style, AspectRatio, str]) -> str:
    return value.value if isinstance(value, (Style, AspectRatio)) else str(value)


def describer_system_instruction(style: StyleLike, user_prompt: str, image_count: int) -> str:
    """System instruction for the reference-image description model."""
    style_text = _text(style)
    request_text = user_prompt or f"Describe the combined essence of the image(s) for recreation in a {style_text} style."
    return (
        f"You are an expert prompt engineer. Analyze the provided {image_count} image(s). "
        f"The user has also provided the following text request: '{request_text}'. "
        "Synthesize information from ALL provided images and the user's text request to generate a single, "
        "concise, and highly descriptive text prompt. This prompt will be fed into an image generation model. "
        f"The prompt should be tailored for a high-quality {style_text} generation, emphasizing appropriate "
        f"artistic elements like lighting, focus, color palette, and detail level suitable for the {style_text}. "
        "Output *only* the final generation prompt, without any surrounding text, explanations, or markdown formatting. "
        "Ensure the description captures key artistic elements, composition, character expressions (if any), and "
        f"color palettes from the reference images, translating them into a cohesive {style_text} aesthetic. "
        "If multiple images are very different, try to find a common theme or style, or a way to blend their key "
        f"features as requested by the user's text and desired {style_text}."
    )


def describer_text_part(style: StyleLike, user_prompt: str, image_count: int) -> str:
    """Text part sent alongside the reference images."""
    if user_prompt:
        return user_prompt
    return (
        f"Describe the key elements from the {image_count} uploaded image(s) "
        f"to guide an image generator for the {_text(style)} style."
    )


def resolve_effective_prompt(
    described: str,
    user_prompt: str,
    has_reference_images: bool,
    style: StyleLike,
) -> str:
    """Pick the content string for the final prompt, by priority."""
    if described:
        return described
    trimmed = user_prompt.strip()
    if trimmed:
        return trimmed
    if has_reference_images:
        return f"a scene inspired by the uploaded image(s), in a vibrant {_text(style)} style"
    return f"a beautiful and intricate {_text(style)} artwork"


def aspect_ratio_clause(aspect_ratio: AspectRatioLike) -> str:
    """Clause for a supported ratio, or "" for anything else."""
    return ASPECT_RATIO_CLAUSES.get(_text(aspect_ratio), "")


def normalize_prompt(text: str) -> str:
    """Collapse whitespace and stray periods, then trim."""
    text = _WHITESPACE_RUN.sub(" ", text)
    text = _SPACE_BEFORE_PERIOD.sub(".", text)
    text = _PERIOD_RUN.sub(".", text)
    return text.strip()


def assemble_final_prompt(effective_prompt: str, style: StyleLike, aspect_ratio: AspectRatioLike) -> str:
    """Build the normalized prompt sent to the image model."""
    core = f"High-quality, ultra-detailed {_text(style)}: {effective_prompt}."
    return normalize_prompt(f"{core} {QUALITY_SUFFIX} {aspect_ratio_clause(aspect_ratio)}")
