"""Unit tests for image.services — the describe / assemble / synthesize pipeline."""
import base64
import itertools

import pytest

from common.error_messages import ErrorCode, StudioError
from common.models import AspectRatio, Style
from image.client import OUTPUT_MIME_TYPE
from image.models import GenerationRequest
from image.services import download_filename, generate_images


def run_expecting(client, request, code):
    with pytest.raises(StudioError) as exc_info:
        generate_images(client, request)
    assert exc_info.value.code == code
    return exc_info.value


class TestPreconditions:

    @pytest.mark.parametrize("style,ratio", list(itertools.product(Style, AspectRatio)))
    def test_empty_prompt_without_images_never_calls_api(self, make_client, style, ratio):
        client = make_client()
        request = GenerationRequest(prompt="   ", style=style, aspect_ratio=ratio)
        run_expecting(client, request, ErrorCode.INVALID_INPUT)
        assert client.describe_calls == []
        assert client.generate_calls == []

    def test_missing_client_is_configuration_error(self):
        run_expecting(None, GenerationRequest(prompt="a cat"), ErrorCode.MISSING_API_KEY)


class TestTextOnly:

    def test_description_step_is_skipped(self, fake_client):
        images = generate_images(fake_client, GenerationRequest(prompt="  a red fox  ", image_count=2))
        assert fake_client.describe_calls == []
        call = fake_client.generate_calls[0]
        assert call["number_of_images"] == 2
        assert call["prompt"].startswith("High-quality, ultra-detailed anime: a red fox. ")
        assert len(images) == 2

    def test_results_map_in_order(self, fake_client):
        images = generate_images(fake_client, GenerationRequest(prompt="fox", style=Style.PIXEL_ART, image_count=3))
        assert [img.data_url for img in images] == [
            f"data:image/jpeg;base64,{base64.b64encode(f'image-{i}'.encode()).decode('ascii')}" for i in (1, 2, 3)
        ]
        assert [img.filename for img in images] == [
            "generated_pixel art_image_1.jpeg",
            "generated_pixel art_image_2.jpeg",
            "generated_pixel art_image_3.jpeg",
        ]
        assert all(img.mime_type == "image/jpeg" for img in images)

    def test_output_format_matches_download_name(self, fake_client):
        fake_client.output_mime_type = "image/png"
        images = generate_images(fake_client, GenerationRequest(prompt="fox", image_count=2))
        for img in images:
            assert img.mime_type == OUTPUT_MIME_TYPE == "image/jpeg"
            assert img.data_url.startswith("data:image/jpeg;base64,")
            assert img.filename.endswith(".jpeg")

    def test_phases_without_references(self, fake_client):
        phases = []
        generate_images(fake_client, GenerationRequest(prompt="fox"), on_phase=phases.append)
        assert phases == ["synthesizing"]


class TestWithReferences:

    def test_trimmed_description_replaces_prompt(self, make_client, reference_image):
        client = make_client(description="  a glowing dragon  ")
        request = GenerationRequest(prompt="something else", reference_images=[reference_image])
        generate_images(client, request)
        assert client.generate_calls[0]["prompt"].startswith("High-quality, ultra-detailed anime: a glowing dragon. ")
        assert "something else" not in client.generate_calls[0]["prompt"]

    def test_describer_receives_decoded_images_in_order(self, make_client, reference_image, png_bytes):
        second = reference_image.model_copy(update={"mime_type": "image/webp"})
        client = make_client(description="x")
        generate_images(client, GenerationRequest(reference_images=[reference_image, second], style=Style.FANTASY))
        call = client.describe_calls[0]
        assert call["images"] == [(png_bytes, "image/png"), (png_bytes, "image/webp")]
        assert "2 uploaded image(s)" in call["instruction"]
        assert "fantasy" in call["system_instruction"]

    def test_empty_description_falls_back_to_user_prompt(self, make_client, reference_image):
        client = make_client(description="   ")
        generate_images(client, GenerationRequest(prompt=" a tower ", reference_images=[reference_image]))
        assert client.generate_calls[0]["prompt"].startswith("High-quality, ultra-detailed anime: a tower. ")

    def test_empty_description_and_prompt_uses_scene_fallback(self, make_client, reference_image):
        client = make_client(description="")
        generate_images(client, GenerationRequest(reference_images=[reference_image], style=Style.CARTOON))
        assert "a scene inspired by the uploaded image(s), in a vibrant cartoon style" in client.generate_calls[0]["prompt"]

    @pytest.mark.parametrize("text", ["400 Bad image", "400: IMAGE rejected", "Unsupported Image (400)"])
    def test_unsupported_image_error_aborts_run(self, make_client, reference_image, text):
        client = make_client(describe_error=RuntimeError(text))
        run_expecting(client, GenerationRequest(reference_images=[reference_image]), ErrorCode.REFERENCE_IMAGES_UNSUPPORTED)
        assert client.generate_calls == []

    def test_other_description_error_is_wrapped(self, make_client, reference_image):
        client = make_client(describe_error=RuntimeError("503 UNAVAILABLE"))
        err = run_expecting(client, GenerationRequest(reference_images=[reference_image]), ErrorCode.REFERENCE_PROCESSING_FAILED)
        assert err.message == "Failed to process reference images: 503 UNAVAILABLE"
        assert client.generate_calls == []

    def test_phases_with_references(self, make_client, reference_image):
        phases = []
        generate_images(make_client(description="x"), GenerationRequest(reference_images=[reference_image]), on_phase=phases.append)
        assert phases == ["describing", "synthesizing"]


class TestSynthesisResponse:

    def test_entry_without_bytes_fails_whole_call(self, make_client):
        client = make_client(images=[b"one", None, b"three"])
        run_expecting(client, GenerationRequest(prompt="fox", image_count=3), ErrorCode.IMAGE_DATA_MISSING)

    def test_empty_bytes_count_as_missing(self, make_client):
        client = make_client(images=[b""])
        run_expecting(client, GenerationRequest(prompt="fox"), ErrorCode.IMAGE_DATA_MISSING)

    def test_no_images_is_an_error(self, make_client):
        client = make_client(images=[])
        run_expecting(client, GenerationRequest(prompt="fox"), ErrorCode.NO_IMAGE_DATA)

    @pytest.mark.parametrize("text,code", [
        ("403 PERMISSION_DENIED", ErrorCode.INVALID_API_KEY),
        ("429 RESOURCE_EXHAUSTED", ErrorCode.QUOTA_EXCEEDED),
        ("500 INTERNAL", ErrorCode.SYNTHESIS_FAILED),
    ])
    def test_upstream_errors_are_classified(self, make_client, text, code):
        client = make_client(generate_error=RuntimeError(text))
        run_expecting(client, GenerationRequest(prompt="fox"), code)


def test_download_filename():
    assert download_filename(Style.ANIME, 1) == "generated_anime_image_1.jpeg"
