"""Unit tests for the Google Imagen provider."""

import base64
import io
from unittest.mock import MagicMock

import pytest
from PIL import Image

from genmedia.core.config import Config
from genmedia.core.models import GenerationRequest
from genmedia.core.providers.google import GoogleImagenProvider
from genmedia.utils.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    ThrottlingError,
    UpstreamError,
    ValidationError,
)

_PNG_BUF = io.BytesIO()
Image.new("RGB", (16, 9), color=(0, 0, 255)).save(_PNG_BUF, format="PNG")
PNG_B64 = base64.b64encode(_PNG_BUF.getvalue()).decode("ascii")

PREDICT_URL = (
    "https://generativelanguage.googleapis.com/v1beta/models/"
    "imagen-4.0-generate-preview-06-06:predict"
)


def make_response(status_code: int, body) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = body
    response.text = str(body)
    return response


def _provider(*responses) -> tuple[GoogleImagenProvider, MagicMock]:
    session = MagicMock()
    session.request.side_effect = list(responses)
    return GoogleImagenProvider(session=session), session


def _config() -> Config:
    return Config(google_api_key="g-test")


@pytest.mark.unit
class TestGoogleImage:
    def test_predict_returns_data_uri(self):
        provider, session = _provider(
            make_response(
                200, {"predictions": [{"bytesBase64Encoded": PNG_B64, "mimeType": "image/png"}]}
            )
        )
        result = provider.generate_image(
            GenerationRequest(prompt="a red fox", image_size="landscape_16_9"), _config()
        )
        call = session.request.call_args
        assert call.args == ("POST", PREDICT_URL)
        assert call.kwargs["headers"]["x-goog-api-key"] == "g-test"
        assert call.kwargs["json"] == {
            "instances": [{"prompt": "a red fox"}],
            "parameters": {"sampleCount": 1, "aspectRatio": "16:9"},
        }
        asset = result.first
        assert asset.url.startswith("data:image/png;base64,")
        assert (asset.width, asset.height) == (16, 9)
        assert result.provider == "google"
        assert result.model_used == "Imagen 4.0"

    def test_sample_count_clamped(self):
        provider, session = _provider(
            make_response(200, {"predictions": [{"bytesBase64Encoded": PNG_B64}] * 4})
        )
        result = provider.generate_image(GenerationRequest(prompt="x", num_images=10), _config())
        assert session.request.call_args.kwargs["json"]["parameters"]["sampleCount"] == 4
        assert len(result.assets) == 4
        assert result.has_nsfw_concepts == [False] * 4

    def test_seed_only_sent_without_safety_filter(self):
        provider, session = _provider(
            make_response(200, {"predictions": [{"bytesBase64Encoded": PNG_B64}]}),
            make_response(200, {"predictions": [{"bytesBase64Encoded": PNG_B64}]}),
        )
        provider.generate_image(GenerationRequest(prompt="x", seed=9), _config())
        assert "seed" not in session.request.call_args.kwargs["json"]["parameters"]
        result = provider.generate_image(
            GenerationRequest(prompt="x", seed=9, enable_safety_checker=False), _config()
        )
        assert session.request.call_args.kwargs["json"]["parameters"]["seed"] == 9
        assert result.seed == 9

    def test_missing_predictions(self):
        provider, _ = _provider(make_response(200, {"error": "filtered"}))
        with pytest.raises(UpstreamError) as exc_info:
            provider.generate_image(GenerationRequest(prompt="x"), _config())
        assert "Invalid response format" in str(exc_info.value)

    def test_empty_predictions(self):
        provider, _ = _provider(make_response(200, {"predictions": []}))
        with pytest.raises(UpstreamError) as exc_info:
            provider.generate_image(GenerationRequest(prompt="x"), _config())
        assert "no assets produced" in str(exc_info.value)

    def test_prediction_without_image_data(self):
        provider, _ = _provider(make_response(200, {"predictions": [{"raiFilteredReason": "x"}]}))
        with pytest.raises(UpstreamError) as exc_info:
            provider.generate_image(GenerationRequest(prompt="x"), _config())
        assert "No image data found in prediction 0" in str(exc_info.value)


@pytest.mark.unit
class TestGoogleErrors:
    def test_missing_credential_makes_no_call(self):
        provider, session = _provider()
        with pytest.raises(ConfigurationError) as exc_info:
            provider.generate_image(GenerationRequest(prompt="x"), Config())
        assert "GOOGLE_API_KEY" in str(exc_info.value)
        session.request.assert_not_called()

    @pytest.mark.parametrize(
        "status, error_type",
        [(401, AuthenticationError), (403, AuthorizationError), (429, ThrottlingError)],
    )
    def test_vendor_status_mapping(self, status, error_type):
        provider, _ = _provider(
            make_response(status, {"error": {"message": "billing required", "code": status}})
        )
        with pytest.raises(error_type):
            provider.generate_image(GenerationRequest(prompt="x"), _config())

    def test_authorization_message_includes_vendor_detail(self):
        provider, _ = _provider(make_response(403, {"error": {"message": "billing required"}}))
        with pytest.raises(AuthorizationError) as exc_info:
            provider.generate_image(GenerationRequest(prompt="x"), _config())
        assert "billing required" in str(exc_info.value)

    def test_video_not_supported(self):
        provider, session = _provider()
        with pytest.raises(ValidationError) as exc_info:
            provider.generate_video(GenerationRequest(prompt="x"), _config())
        assert exc_info.value.field == "provider"
        session.request.assert_not_called()

    def test_upscale_not_supported(self):
        provider, _ = _provider()
        with pytest.raises(ValidationError):
            provider.upscale_image("https://cdn/in.png", _config())
