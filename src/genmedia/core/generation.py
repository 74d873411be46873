"""
Library entry points for image and video generation.

These functions resolve the adapter for an explicit provider id (or the
registry's current selection when none is given), check the credential and
the prompt before any network call, and hand the request to the adapter.
"""

from collections.abc import Callable

from genmedia.core.config import Config, get_config
from genmedia.core.models import GenerationRequest, GenerationResult, validate_prompt
from genmedia.core.providers import get_registry
from genmedia.core.providers.base import MediaProvider
from genmedia.logging_config import get_logger, log_context
from genmedia.utils.exceptions import UpstreamError, ValidationError

logger = get_logger(__name__)


def _prepare(
    provider: str | None,
    config: Config | None,
) -> tuple[MediaProvider, Config]:
    config = config or get_config()
    adapter = get_registry().resolve(provider)
    adapter.require_credential(config)
    return adapter, config


def _checked(result: GenerationResult) -> GenerationResult:
    if not result.assets:
        raise UpstreamError("no assets produced", provider=result.provider)
    return result


def generate_image(
    request: GenerationRequest,
    provider: str | None = None,
    config: Config | None = None,
    cancel_check: Callable[[], bool] | None = None,
) -> GenerationResult:
    """
    Generate one or more images.

    Args:
        request: Normalized request; numeric knobs are clamped by the adapter
        provider: Provider id; defaults to the registry's current selection
        config: Optional config; if None, uses shared config from get_config()
        cancel_check: Optional callable returning True to stop waiting on the vendor

    Returns:
        GenerationResult with at least one asset

    Raises:
        ConfigurationError: If the provider's credential is not configured
        ValidationError: If the prompt is empty or the provider is unknown
        ProviderError: If the vendor call fails
        CancellationError: If cancel_check returned True
    """
    adapter, config = _prepare(provider, config)
    validate_prompt(request.prompt)
    with log_context(provider=adapter.provider_id):
        return _checked(adapter.generate_image(request, config, cancel_check))


def generate_video(
    request: GenerationRequest,
    provider: str | None = None,
    config: Config | None = None,
    cancel_check: Callable[[], bool] | None = None,
) -> GenerationResult:
    """
    Generate a video (text-to-video, or image-to-video when request.image_url is set).

    Raises the same errors as generate_image(); providers without video
    support raise ValidationError.
    """
    adapter, config = _prepare(provider, config)
    validate_prompt(request.prompt)
    with log_context(provider=adapter.provider_id):
        return _checked(adapter.generate_video(request, config, cancel_check))


def upscale_image(
    image_url: str | None,
    provider: str | None = None,
    config: Config | None = None,
    cancel_check: Callable[[], bool] | None = None,
) -> GenerationResult:
    """Upscale an existing image by 4x."""
    adapter, config = _prepare(provider, config)
    if not image_url or not image_url.strip():
        raise ValidationError("image_url is required", field="image_url")
    with log_context(provider=adapter.provider_id):
        return _checked(adapter.upscale_image(image_url, config, cancel_check))
