"""
genmedia - generative media proxy

A Python package that forwards prompts to hosted image and video generation
providers (Replicate, fal.ai, Google Imagen) and normalizes their responses
into one result shape.

Library usage:
- Pass the provider explicitly (generate_image(request, provider="fal")) or
  rely on the registry's current selection (get_registry().set_current(...)).
- Configuration can be passed per operation (config=my_config) or via the
  shared config: use get_config() / set_config() and omit the config argument.
- Logging: control verbosity with set_verbosity(0|1|2) or configure_logging(verbose_level, quiet);
  GENMEDIA_VERBOSITY env (0/1/2) is read when the CLI or server starts.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("genmedia")
except PackageNotFoundError:
    # Package is not installed (e.g., running from source in development)
    __version__ = "0.0.0.dev"

from genmedia.core.config import (
    DEFAULT_PROVIDER,
    Config,
    get_config,
    set_config,
)
from genmedia.core.generation import generate_image, generate_video, upscale_image
from genmedia.core.models import (
    GeneratedAsset,
    GenerationRequest,
    GenerationResult,
    validate_prompt,
)
from genmedia.core.providers import ProviderDescriptor, get_registry
from genmedia.logging_config import configure_logging, set_verbosity
from genmedia.utils.exceptions import (
    AuthenticationError,
    AuthorizationError,
    CancellationError,
    ConfigurationError,
    GenmediaError,
    NetworkError,
    ProviderError,
    RequestTimeoutError,
    ThrottlingError,
    UpstreamError,
    ValidationError,
)

__all__ = [
    "AuthenticationError",
    "AuthorizationError",
    "CancellationError",
    "configure_logging",
    "Config",
    "ConfigurationError",
    "DEFAULT_PROVIDER",
    "GeneratedAsset",
    "GenerationRequest",
    "GenerationResult",
    "GenmediaError",
    "NetworkError",
    "ProviderDescriptor",
    "ProviderError",
    "RequestTimeoutError",
    "ThrottlingError",
    "UpstreamError",
    "ValidationError",
    "generate_image",
    "generate_video",
    "get_config",
    "get_registry",
    "set_config",
    "set_verbosity",
    "upscale_image",
    "validate_prompt",
]
