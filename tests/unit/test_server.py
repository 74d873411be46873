"""Unit tests for the HTTP proxy (FastAPI app)."""

import base64
import io
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from genmedia.core.config import Config
from genmedia.core.providers import get_registry
from genmedia.server import create_app
from genmedia.server.errors import status_for
from genmedia.utils.exceptions import (
    AuthenticationError,
    AuthorizationError,
    CancellationError,
    ConfigurationError,
    NetworkError,
    RequestTimeoutError,
    ThrottlingError,
    UpstreamError,
    ValidationError,
)

_PNG_BUF = io.BytesIO()
Image.new("RGB", (8, 8)).save(_PNG_BUF, format="PNG")
PNG_B64 = base64.b64encode(_PNG_BUF.getvalue()).decode("ascii")


def make_response(status_code: int, body) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = body
    response.text = str(body)
    return response


def _client(config: Config | None = None) -> TestClient:
    config = config or Config(
        replicate_api_token="r8_test",
        fal_key="fal-test",
        google_api_key="g-test",
        poll_interval=0.01,
        poll_timeout=5,
    )
    return TestClient(create_app(config))


def _mock_session(provider_id: str, *responses) -> MagicMock:
    session = MagicMock()
    session.request.side_effect = list(responses)
    get_registry().get(provider_id)._session = session
    return session


@pytest.mark.unit
class TestStatusFor:
    @pytest.mark.parametrize(
        "exc, status",
        [
            (ValidationError("x"), 400),
            (ConfigurationError("x"), 500),
            (AuthenticationError("x"), 401),
            (AuthorizationError("x"), 403),
            (ThrottlingError("x"), 429),
            (UpstreamError("x"), 500),
            (NetworkError("x"), 500),
            (RequestTimeoutError("x"), 500),
            (CancellationError("x"), 499),
        ],
    )
    def test_mapping(self, exc, status):
        assert status_for(exc) == status


@pytest.mark.unit
class TestHealth:
    def test_health(self):
        response = _client().get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_invalid_config_rejected_at_startup(self):
        with pytest.raises(ConfigurationError):
            create_app(Config(poll_interval=0))


@pytest.mark.unit
@pytest.mark.usefixtures("no_sleep")
class TestGenerateImageEndpoint:
    def test_red_fox(self):
        session = _mock_session(
            "replicate",
            make_response(201, {"id": "p1", "status": "starting"}),
            make_response(
                200,
                {
                    "id": "p1",
                    "status": "succeeded",
                    "output": ["https://replicate.delivery/p1/out-0.webp"],
                },
            ),
        )
        response = _client().post(
            "/generate-image",
            json={"prompt": "a red fox", "image_size": "square_hd", "num_images": 1},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["provider"] == "replicate"
        assert body["prompt"] == "a red fox"
        assert len(body["images"]) == 1
        assert body["images"][0]["width"] == 1024
        assert body["images"][0]["height"] == 1024
        assert body["has_nsfw_concepts"] == [False]
        assert isinstance(body["seed"], int)
        model_input = session.request.call_args_list[0].kwargs["json"]["input"]
        assert model_input["aspect_ratio"] == "1:1"

    @pytest.mark.parametrize("prompt", ["", "   "])
    def test_blank_prompt_is_400_without_vendor_call(self, prompt):
        session = _mock_session("replicate")
        response = _client().post("/generate-image", json={"prompt": prompt})
        assert response.status_code == 400
        assert response.json() == {"error": "Prompt is required"}
        session.request.assert_not_called()

    def test_missing_credential_is_500(self):
        session = _mock_session("replicate")
        response = _client(Config()).post("/generate-image", json={"prompt": "a red fox"})
        assert response.status_code == 500
        assert "REPLICATE_API_TOKEN" in response.json()["error"]
        session.request.assert_not_called()

    @pytest.mark.parametrize("status", [401, 403, 429])
    def test_vendor_errors_keep_status(self, status):
        _mock_session("replicate", make_response(status, {"detail": "no"}))
        response = _client().post("/generate-image", json={"prompt": "a red fox"})
        assert response.status_code == status
        assert response.json()["error"]

    def test_vendor_payment_required_is_403(self):
        _mock_session("replicate", make_response(402, {"detail": "Insufficient credit"}))
        response = _client().post("/generate-image", json={"prompt": "a red fox"})
        assert response.status_code == 403
        assert "Insufficient credit" in response.json()["error"]

    def test_failed_prediction_is_500_with_detail(self):
        _mock_session(
            "replicate",
            make_response(201, {"id": "p1", "status": "starting"}),
            make_response(200, {"status": "failed", "error": "CUDA out of memory"}),
        )
        response = _client().post("/generate-image", json={"prompt": "x"})
        assert response.status_code == 500
        assert "CUDA out of memory" in response.json()["error"]

    def test_invalid_json_is_400(self):
        response = _client().post(
            "/generate-image", content=b"{not json", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400

    def test_non_object_body_is_400(self):
        response = _client().post("/generate-image", json=["a red fox"])
        assert response.status_code == 400

    def test_wrong_type_is_400(self):
        response = _client().post("/generate-image", json={"prompt": "x", "num_images": "lots"})
        assert response.status_code == 400

    @pytest.mark.parametrize(
        "body",
        [
            b'{"prompt": "a fox", "guidance_scale": NaN}',
            b'{"prompt": "a fox", "num_inference_steps": Infinity}',
            b'{"prompt": "a fox", "num_images": 1e400}',
        ],
    )
    def test_non_finite_number_is_400_without_vendor_call(self, body):
        session = _mock_session("replicate")
        response = _client().post(
            "/generate-image", content=body, headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400
        assert "finite" in response.json()["error"]
        session.request.assert_not_called()

    def test_provider_in_body(self):
        _mock_session(
            "fal",
            make_response(200, {"request_id": "r1", "status": "COMPLETED"}),
            make_response(200, {"images": [{"url": "https://fal.media/a.jpg"}]}),
        )
        response = _client().post("/generate-image", json={"prompt": "x", "provider": "fal"})
        assert response.status_code == 200
        assert response.json()["provider"] == "fal"

    def test_unknown_provider_in_body_is_400(self):
        response = _client().post("/generate-image", json={"prompt": "x", "provider": "other"})
        assert response.status_code == 400

    def test_follows_current_selection(self):
        client = _client()
        get_registry().set_current("google")
        _mock_session("google", make_response(200, {"predictions": [{"bytesBase64Encoded": PNG_B64}]}))
        response = client.post("/generate-image", json={"prompt": "x"})
        assert response.status_code == 200
        assert response.json()["provider"] == "google"

    def test_cancellation_is_499(self):
        with patch(
            "genmedia.server.routes.generation.generation.generate_image",
            side_effect=CancellationError("cancelled"),
        ):
            response = _client().post("/generate-image", json={"prompt": "x"})
        assert response.status_code == 499


@pytest.mark.unit
class TestGenerateImageGoogleEndpoint:
    def test_pinned_to_google(self):
        session = _mock_session(
            "google", make_response(200, {"predictions": [{"bytesBase64Encoded": PNG_B64}]})
        )
        response = _client().post("/generate-image-google", json={"prompt": "a red fox"})
        assert response.status_code == 200
        body = response.json()
        assert body["provider"] == "google"
        assert body["images"][0]["url"].startswith("data:image/png;base64,")
        assert get_registry().current_id == "replicate"
        session.request.assert_called_once()


@pytest.mark.unit
@pytest.mark.usefixtures("no_sleep")
class TestGenerateVideoEndpoint:
    def test_video(self):
        _mock_session(
            "replicate",
            make_response(201, {"id": "p1", "status": "starting"}),
            make_response(200, {"status": "succeeded", "output": "https://replicate.delivery/v.mp4"}),
        )
        response = _client().post("/generate-video", json={"prompt": "waves", "fps": 7})
        assert response.status_code == 200
        body = response.json()
        assert body["url"] == "https://replicate.delivery/v.mp4"
        assert body["fps"] == 7
        assert body["duration"] == 2.0
        assert body["provider"] == "replicate"

    def test_google_video_is_400(self):
        response = _client().post("/generate-video", json={"prompt": "waves", "provider": "google"})
        assert response.status_code == 400


@pytest.mark.unit
@pytest.mark.usefixtures("no_sleep")
class TestUpscaleEndpoint:
    def test_missing_image_url_is_400(self):
        response = _client().post("/upscale-image", json={})
        assert response.status_code == 400

    def test_upscale(self):
        _mock_session(
            "replicate",
            make_response(201, {"id": "p1", "status": "starting"}),
            make_response(200, {"status": "succeeded", "output": "https://replicate.delivery/up.png"}),
        )
        response = _client().post("/upscale-image", json={"image_url": "https://cdn/in.png"})
        assert response.status_code == 200
        assert response.json()["image"]["url"] == "https://replicate.delivery/up.png"


@pytest.mark.unit
class TestProvidersEndpoints:
    def test_list(self):
        response = _client().get("/providers")
        assert response.status_code == 200
        body = response.json()
        assert body["current"] == "replicate"
        assert [p["id"] for p in body["providers"]] == ["replicate", "fal", "google"]
        assert body["providers"][0]["status"] == "available"

    def test_switch(self):
        client = _client()
        response = client.put("/providers/current", json={"provider": "fal"})
        assert response.status_code == 200
        assert response.json()["current"] == "fal"
        assert client.get("/providers").json()["current"] == "fal"

    def test_switch_unknown_is_400(self):
        response = _client().put("/providers/current", json={"provider": "other"})
        assert response.status_code == 400
        assert get_registry().current_id == "replicate"

    def test_switch_missing_is_400(self):
        response = _client().put("/providers/current", json={})
        assert response.status_code == 400

    def test_starts_on_configured_default(self):
        client = _client(Config(fal_key="fal-test", default_provider="fal"))
        assert get_registry().current_id == "fal"
        assert client.get("/providers").json()["current"] == "fal"

    def test_configured_default_used_for_requests(self):
        client = _client(Config(google_api_key="g-test", default_provider="google"))
        _mock_session("google", make_response(200, {"predictions": [{"bytesBase64Encoded": PNG_B64}]}))
        response = client.post("/generate-image", json={"prompt": "x"})
        assert response.status_code == 200
        assert response.json()["provider"] == "google"
