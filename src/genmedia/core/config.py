"""
Configuration management for genmedia.

This module handles vendor credentials, model identifiers, endpoint URLs and
the polling budget used by asynchronous providers.
"""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from genmedia.logging_config import get_logger
from genmedia.utils.exceptions import ConfigurationError

logger = get_logger(__name__)

# Load environment variables from .env file
load_dotenv()

# Default configuration constants
DEFAULT_PROVIDER = "replicate"
DEFAULT_REPLICATE_BASE_URL = "https://api.replicate.com/v1"
DEFAULT_FAL_QUEUE_URL = "https://queue.fal.run"
DEFAULT_GOOGLE_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_POLL_TIMEOUT = 300.0
DEFAULT_REQUEST_TIMEOUT = 60

# Provider ids accepted by validate(); do not import from genmedia.core.providers (circular import)
KNOWN_PROVIDERS = ("replicate", "fal", "google")

# Environment variable holding each vendor's secret
CREDENTIAL_ENV = {
    "replicate": "REPLICATE_API_TOKEN",
    "fal": "FAL_KEY",
    "google": "GOOGLE_API_KEY",
}


@dataclass
class Config:
    """Configuration for the genmedia proxy and library."""

    # Vendor credentials (excluded from repr to avoid leaking secrets)
    replicate_api_token: str = field(default="", repr=False)
    fal_key: str = field(default="", repr=False)
    google_api_key: str = field(default="", repr=False)

    # Vendor endpoints
    replicate_base_url: str = DEFAULT_REPLICATE_BASE_URL
    fal_queue_url: str = DEFAULT_FAL_QUEUE_URL
    google_base_url: str = DEFAULT_GOOGLE_BASE_URL

    # Selection at process start
    default_provider: str = DEFAULT_PROVIDER

    # Replicate model versions
    replicate_image_version: str = (
        "39ed52f2a78e934b3ba6e2a89f5b1c712de7dfea535525255b1aa35c5565e08b"  # SDXL
    )
    replicate_text_to_video_version: str = (
        "9f747673945c62801b13b84701c783929c0ee784e4748ec062204894dda1a351"  # Zeroscope v2 XL
    )
    replicate_image_to_video_version: str = (
        "3f0457e4619daac51203dedb1a4f3482439eb5d8dceb3a764f527a8f7c8b5b3a"  # SVD
    )
    replicate_upscale_version: str = (
        "42fed1c4974146d4d2414e2be2c5277c7fcf05fcc3a73abf41610695738c1d7b"  # Real-ESRGAN
    )

    # fal.ai application ids
    fal_image_model: str = "fal-ai/flux/dev"
    fal_text_to_video_model: str = "fal-ai/minimax/video-01"
    fal_image_to_video_model: str = "fal-ai/kling-video/v2.1/standard/image-to-video"
    fal_upscale_model: str = "fal-ai/esrgan"

    # Google Imagen model
    google_image_model: str = "imagen-4.0-generate-preview-06-06"

    # Timing (seconds)
    poll_interval: float = DEFAULT_POLL_INTERVAL
    poll_timeout: float = DEFAULT_POLL_TIMEOUT
    request_timeout: int = DEFAULT_REQUEST_TIMEOUT

    # Debug: log vendor payload/response with image data truncated
    debug_api: bool = False

    _validated: bool = field(default=False, repr=False)

    @classmethod
    def from_env(cls) -> "Config":
        """
        Create a Config instance from environment variables.

        Environment variables:
            REPLICATE_API_TOKEN, FAL_KEY, GOOGLE_API_KEY: vendor secrets
            GENMEDIA_DEFAULT_PROVIDER: Initial provider selection (default replicate)
            GENMEDIA_POLL_INTERVAL: Seconds between job status checks (default 1)
            GENMEDIA_POLL_TIMEOUT: Max seconds to wait for a vendor job (default 300)
            GENMEDIA_REQUEST_TIMEOUT: Per HTTP call timeout in seconds (default 60)
            GENMEDIA_DEBUG_API: Log truncated vendor payloads when 1/true/yes

        Returns:
            Config instance populated from environment
        """

        def _float_env(name: str, default: float) -> float:
            val = os.getenv(name)
            if val is None or val == "":
                return default
            try:
                return float(val)
            except ValueError as e:
                raise ConfigurationError(f"{name} must be a number, got {val!r}.") from e

        debug_api = os.getenv("GENMEDIA_DEBUG_API", "").strip().lower() in ("1", "true", "yes")

        return cls(
            replicate_api_token=os.getenv("REPLICATE_API_TOKEN", ""),
            fal_key=os.getenv("FAL_KEY", ""),
            google_api_key=os.getenv("GOOGLE_API_KEY", ""),
            replicate_base_url=os.getenv("GENMEDIA_REPLICATE_BASE_URL", DEFAULT_REPLICATE_BASE_URL),
            fal_queue_url=os.getenv("GENMEDIA_FAL_QUEUE_URL", DEFAULT_FAL_QUEUE_URL),
            google_base_url=os.getenv("GENMEDIA_GOOGLE_BASE_URL", DEFAULT_GOOGLE_BASE_URL),
            default_provider=os.getenv("GENMEDIA_DEFAULT_PROVIDER", DEFAULT_PROVIDER),
            poll_interval=_float_env("GENMEDIA_POLL_INTERVAL", DEFAULT_POLL_INTERVAL),
            poll_timeout=_float_env("GENMEDIA_POLL_TIMEOUT", DEFAULT_POLL_TIMEOUT),
            request_timeout=int(_float_env("GENMEDIA_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT)),
            debug_api=debug_api,
        )

    def validate(self) -> None:
        """
        Validate the configuration.

        Credentials are not required here: a missing credential only matters
        for the provider actually used, and is reported per request.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        logger.debug("Validating config")

        if self.poll_interval <= 0:
            raise ConfigurationError(f"poll_interval must be positive, got {self.poll_interval}.")
        if self.poll_timeout < self.poll_interval:
            raise ConfigurationError(
                f"poll_timeout ({self.poll_timeout}) must not be shorter than "
                f"poll_interval ({self.poll_interval})."
            )
        if self.request_timeout <= 0:
            raise ConfigurationError(
                f"request_timeout must be positive, got {self.request_timeout}."
            )
        if self.default_provider not in KNOWN_PROVIDERS:
            raise ConfigurationError(
                f"Unknown default_provider: {self.default_provider!r}. "
                f"Must be one of: {', '.join(KNOWN_PROVIDERS)}."
            )

        self._validated = True

    def is_valid(self) -> bool:
        """Return True if validate() has been called successfully."""
        return self._validated

    def credential_for(self, provider_id: str) -> str:
        """
        Return the secret configured for a provider.

        Args:
            provider_id: One of KNOWN_PROVIDERS

        Returns:
            The credential, or "" when not configured
        """
        if provider_id == "replicate":
            return self.replicate_api_token
        if provider_id == "fal":
            return self.fal_key
        if provider_id == "google":
            return self.google_api_key
        return ""

    def set_credential(self, provider_id: str, value: str) -> None:
        """
        Set the secret for a provider (e.g. from a CLI flag).

        Raises:
            ConfigurationError: If the provider is unknown or the value is empty
        """
        if not value:
            raise ConfigurationError("Credential cannot be empty")
        if provider_id == "replicate":
            self.replicate_api_token = value
        elif provider_id == "fal":
            self.fal_key = value
        elif provider_id == "google":
            self.google_api_key = value
        else:
            raise ConfigurationError(f"Unknown provider: {provider_id!r}.")


# Global configuration instance
_global_config: Config | None = None


def get_config() -> Config:
    """
    Get the global configuration instance.

    Returns:
        The global Config instance
    """
    global _global_config
    if _global_config is None:
        _global_config = Config.from_env()
    return _global_config


def set_config(config: Config) -> None:
    """
    Set the global configuration instance.

    Args:
        config: The Config instance to use globally
    """
    global _global_config
    _global_config = config
