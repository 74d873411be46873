"""Unit tests for the genmedia CLI."""

import json
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner, Result

from genmedia.cli import cli
from genmedia.cli.handlers import map_exception_to_exit
from genmedia.cli.utils import (
    EXIT_API_OR_NETWORK,
    EXIT_CANCELLED,
    EXIT_VALIDATION_OR_CONFIG,
)
from genmedia.core.config import Config
from genmedia.core.models import GeneratedAsset, GenerationResult
from genmedia.utils.exceptions import (
    AuthenticationError,
    CancellationError,
    ConfigurationError,
    ThrottlingError,
    ValidationError,
)

_IMAGE = GeneratedAsset(
    url="https://replicate.delivery/p1/out-0.webp",
    width=1024,
    height=1024,
    content_type="image/webp",
    file_name="generated-image-0.webp",
)
_VIDEO = GeneratedAsset(
    url="https://replicate.delivery/v.mp4",
    width=1024,
    height=576,
    content_type="video/mp4",
    file_name="generated-video-0.mp4",
)


def _run_cli(*args: str) -> Result:
    runner = CliRunner()
    return runner.invoke(cli, list(args))


def _image_result(provider: str = "replicate") -> GenerationResult:
    return GenerationResult(
        assets=(_IMAGE,),
        prompt="a red fox",
        seed=42,
        provider=provider,
        model_used="SDXL",
        timings={"inference": 2.0},
    )


@pytest.fixture
def env_config():
    config = Config(replicate_api_token="r8_env")
    with patch.object(Config, "from_env", return_value=config):
        yield config


@pytest.mark.unit
@pytest.mark.usefixtures("env_config")
class TestImageCommand:
    def test_required_prompt(self):
        result = _run_cli("image")
        assert result.exit_code != 0
        assert "prompt" in result.output.lower()

    @patch("genmedia.cli.commands.generate_image")
    def test_prints_json_result(self, mock_generate: MagicMock):
        mock_generate.return_value = _image_result()
        result = _run_cli("image", "--prompt", "a red fox", "--quiet")
        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["images"][0]["url"] == _IMAGE.url
        assert payload["seed"] == 42
        assert payload["provider"] == "replicate"

    @patch("genmedia.cli.commands.generate_image")
    def test_options_build_request(self, mock_generate: MagicMock):
        mock_generate.return_value = _image_result()
        result = _run_cli(
            "image",
            "-p",
            "a red fox",
            "--size",
            "landscape_16_9",
            "-n",
            "2",
            "--steps",
            "30",
            "--guidance",
            "5",
            "--seed",
            "7",
            "--no-safety",
            "--quiet",
        )
        assert result.exit_code == 0
        request = mock_generate.call_args.args[0]
        assert request.prompt == "a red fox"
        assert request.image_size == "landscape_16_9"
        assert request.num_images == 2
        assert request.num_inference_steps == 30
        assert request.guidance_scale == 5.0
        assert request.seed == 7
        assert request.enable_safety_checker is False
        assert mock_generate.call_args.kwargs["provider"] == "replicate"

    @patch("genmedia.cli.commands.generate_image")
    def test_provider_and_api_key(self, mock_generate: MagicMock):
        mock_generate.return_value = _image_result("fal")
        result = _run_cli("image", "-p", "x", "--provider", "fal", "--api-key", "fal-cli", "-q")
        assert result.exit_code == 0
        kwargs = mock_generate.call_args.kwargs
        assert kwargs["provider"] == "fal"
        assert kwargs["config"].fal_key == "fal-cli"
        assert callable(kwargs["cancel_check"])

    @patch("genmedia.cli.commands.generate_image")
    def test_debug_api_flag(self, mock_generate: MagicMock):
        mock_generate.return_value = _image_result()
        _run_cli("image", "-p", "x", "--debug-api", "-q")
        assert mock_generate.call_args.kwargs["config"].debug_api is True

    @patch("genmedia.cli.commands.generate_image")
    def test_unknown_size_rejected_by_click(self, mock_generate: MagicMock):
        result = _run_cli("image", "-p", "x", "--size", "poster")
        assert result.exit_code == 2
        mock_generate.assert_not_called()

    @pytest.mark.parametrize(
        "exc, code",
        [
            (ValidationError("Prompt is required", field="prompt"), EXIT_VALIDATION_OR_CONFIG),
            (ConfigurationError("REPLICATE_API_TOKEN missing"), EXIT_VALIDATION_OR_CONFIG),
            (AuthenticationError("bad key", status_code=401), EXIT_API_OR_NETWORK),
            (CancellationError("stop"), EXIT_CANCELLED),
        ],
    )
    def test_exit_codes(self, exc, code):
        with patch("genmedia.cli.commands.generate_image", side_effect=exc):
            result = _run_cli("image", "-p", "x", "--quiet")
        assert result.exit_code == code


@pytest.mark.unit
@pytest.mark.usefixtures("env_config")
class TestVideoAndUpscaleCommands:
    @patch("genmedia.cli.commands.generate_video")
    def test_video(self, mock_generate: MagicMock):
        mock_generate.return_value = GenerationResult(
            assets=(_VIDEO,),
            prompt="waves",
            seed=1,
            provider="replicate",
            model_used="Zeroscope V2 XL",
            duration=2.33,
            fps=6,
        )
        result = _run_cli(
            "video", "-p", "waves", "--length", "14", "--fps", "6", "--image-url", "https://in", "-q"
        )
        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["url"] == _VIDEO.url
        assert payload["duration"] == 2.33
        request = mock_generate.call_args.args[0]
        assert request.video_length == 14
        assert request.image_url == "https://in"

    @patch("genmedia.cli.commands.upscale_image")
    def test_upscale(self, mock_upscale: MagicMock):
        mock_upscale.return_value = GenerationResult(
            assets=(_IMAGE,), prompt="", seed=0, provider="replicate", model_used="Real-ESRGAN"
        )
        result = _run_cli("upscale", "https://cdn/in.png", "-q")
        assert result.exit_code == 0
        assert json.loads(result.output) == {"image": _IMAGE.to_dict(), "provider": "replicate"}
        assert mock_upscale.call_args.args[0] == "https://cdn/in.png"


@pytest.mark.unit
class TestProvidersCommand:
    def test_lists_providers(self):
        result = _run_cli("providers")
        assert result.exit_code == 0


@pytest.mark.unit
class TestMapExceptionToExit:
    def test_validation_includes_field(self):
        code, msg = map_exception_to_exit(ValidationError("bad", field="prompt"))
        assert code == EXIT_VALIDATION_OR_CONFIG
        assert msg == "bad (field: prompt)"

    def test_provider_error(self):
        code, msg = map_exception_to_exit(ThrottlingError("Rate limit exceeded."))
        assert code == EXIT_API_OR_NETWORK
        assert msg == "Rate limit exceeded."

    def test_cancelled(self):
        assert map_exception_to_exit(CancellationError()) == (EXIT_CANCELLED, "Cancelled.")

    def test_unexpected(self):
        code, _ = map_exception_to_exit(RuntimeError("boom"))
        assert code == EXIT_API_OR_NETWORK
