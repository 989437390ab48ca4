"""Gemini / Imagen client used by the generation pipeline."""
from typing import Any, List, Sequence, Tuple

from google import genai
from google.genai import types

from config import Config
from utils.logger import get_logger

logger = get_logger("image.client")

OUTPUT_MIME_TYPE = "image/jpeg"


class StudioClient:
    """Thin wrapper over ``genai.Client`` for the two calls the studio makes.

    Built once at startup with the API key passed in; the pipeline receives
    it explicitly and never reads credentials from the environment.
    """

    def __init__(
        self,
        api_key: str,
        text_model: str = Config.GEMINI_TEXT_MODEL,
        image_model: str = Config.IMAGEN_MODEL,
    ):
        if not api_key:
            raise ValueError("api_key is required")
        self.text_model = text_model
        self.image_model = image_model
        self._client = genai.Client(api_key=api_key)

    def describe_images(
        self,
        images: Sequence[Tuple[bytes, str]],
        instruction: str,
        system_instruction: str,
    ) -> str:
        """
        Ask the multimodal model for a generation prompt.

        Args:
            images: (bytes, mime_type) pairs, in selection order
            instruction: Text part appended after the images
            system_instruction: System-level instruction for the model

        Returns:
            The raw response text ("" when the model returned none)
        """
        parts = [types.Part.from_bytes(data=data, mime_type=mime_type) for data, mime_type in images]
        parts.append(types.Part.from_text(text=instruction))

        logger.info(f"Requesting description from {self.text_model} for {len(images)} image(s)")
        response = self._client.models.generate_content(
            model=self.text_model,
            contents=[types.Content(role="user", parts=parts)],
            config=types.GenerateContentConfig(system_instruction=system_instruction),
        )
        return response.text or ""

    def generate_images(self, prompt: str, number_of_images: int) -> List[Any]:
        """Call the image model; returns the raw ``generated_images`` entries."""
        logger.info(f"Requesting {number_of_images} image(s) from {self.image_model}")
        response = self._client.models.generate_images(
            model=self.image_model,
            prompt=prompt,
            config=types.GenerateImagesConfig(
                number_of_images=number_of_images,
                output_mime_type=OUTPUT_MIME_TYPE,
            ),
        )
        return list(response.generated_images or [])
