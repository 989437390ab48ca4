"""Unit tests for common.error_messages — messages and upstream error classification."""
import pytest

from common.error_messages import (
    DESCRIPTION_ERROR_RULES,
    ERROR_MESSAGES,
    ERROR_STATUS_CODES,
    SYNTHESIS_ERROR_RULES,
    ErrorCode,
    ErrorRule,
    StudioError,
    classify_error,
    get_error_response,
)


def classify_description(text: str) -> StudioError:
    return classify_error(DESCRIPTION_ERROR_RULES, ErrorCode.REFERENCE_PROCESSING_FAILED, text)


def classify_synthesis(text: str) -> StudioError:
    return classify_error(SYNTHESIS_ERROR_RULES, ErrorCode.SYNTHESIS_FAILED, text)


class TestTables:

    def test_every_code_has_message_and_status(self):
        for code in ErrorCode:
            assert code in ERROR_MESSAGES
            assert code in ERROR_STATUS_CODES

    def test_get_error_response(self):
        message, status = get_error_response(ErrorCode.QUOTA_EXCEEDED)
        assert status == 429
        assert message == "Imagen API quota exceeded. Please check your usage limits."


class TestStudioError:

    def test_details_are_embedded(self):
        err = StudioError(ErrorCode.SYNTHESIS_FAILED, "boom")
        assert err.message == "Imagen API request failed: boom"
        assert str(err) == err.message
        assert err.status_code == 502

    def test_static_message_ignores_details(self):
        err = StudioError(ErrorCode.INVALID_INPUT, "ignored")
        assert err.message == "Please enter a prompt or upload at least one image."


class TestDescriptionClassification:

    @pytest.mark.parametrize("text", [
        "400 INVALID_ARGUMENT: Unable to process input image.",
        "400 Bad Request: IMAGE is corrupt",
        "Provided iMaGe is not valid (400)",
    ])
    def test_unsupported_images(self, text):
        err = classify_description(text)
        assert err.code == ErrorCode.REFERENCE_IMAGES_UNSUPPORTED
        assert err.message.endswith(f"Details: {text}")

    @pytest.mark.parametrize("text", [
        "400 INVALID_ARGUMENT: bad request",
        "500 INTERNAL: image pipeline crashed",
        "connection reset",
    ])
    def test_generic_failure(self, text):
        err = classify_description(text)
        assert err.code == ErrorCode.REFERENCE_PROCESSING_FAILED
        assert err.message == f"Failed to process reference images: {text}"


class TestSynthesisClassification:

    @pytest.mark.parametrize("text", [
        "400 API_KEY_INVALID. API key not valid.",
        "403 PERMISSION_DENIED. Imagen is not enabled.",
    ])
    def test_permission(self, text):
        assert classify_synthesis(text).code == ErrorCode.INVALID_API_KEY

    @pytest.mark.parametrize("text", [
        "429 RESOURCE_EXHAUSTED.",
        "You exceeded your current quota",
    ])
    def test_quota(self, text):
        assert classify_synthesis(text).code == ErrorCode.QUOTA_EXCEEDED

    def test_permission_rule_is_case_sensitive(self):
        assert classify_synthesis("permission_denied").code == ErrorCode.SYNTHESIS_FAILED

    def test_generic(self):
        err = classify_synthesis("503 UNAVAILABLE")
        assert err.code == ErrorCode.SYNTHESIS_FAILED
        assert err.message == "Imagen API request failed: 503 UNAVAILABLE"


class TestErrorRule:

    def test_rule_without_needles_never_matches(self):
        assert not ErrorRule(ErrorCode.UNKNOWN_ERROR).matches("anything")

    def test_all_of_and_any_of_combined(self):
        rule = ErrorRule(ErrorCode.UNKNOWN_ERROR, any_of=("x", "y"), all_of=("z",))
        assert rule.matches("z y")
        assert not rule.matches("z")
        assert not rule.matches("x y")
