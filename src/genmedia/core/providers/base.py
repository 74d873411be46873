"""
Provider protocol for image and video generation.

Defines the interface every vendor adapter implements, plus a small base
class holding what the HTTP adapters share: descriptor, session and
credential lookup.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol

import requests

from genmedia.core.config import Config
from genmedia.core.models import GenerationRequest, GenerationResult
from genmedia.core.providers import _http
from genmedia.core.providers.catalog import ProviderDescriptor, get_descriptor
from genmedia.core.sizes import dimensions_for
from genmedia.utils.exceptions import ConfigurationError, ValidationError

CancelCheck = Callable[[], bool]


class MediaProvider(Protocol):
    """Protocol for generation providers.

    Adapters translate a GenerationRequest into one vendor's API and return a
    GenerationResult with at least one asset.
    """

    provider_id: str
    supports_video: bool
    supports_upscale: bool

    def require_credential(self, config: Config) -> str:
        """Return the vendor secret or raise ConfigurationError. Never touches the network."""
        ...

    def generate_image(
        self,
        request: GenerationRequest,
        config: Config,
        cancel_check: CancelCheck | None = None,
    ) -> GenerationResult:
        """Generate images. May raise ValidationError, ProviderError or CancellationError."""
        ...

    def generate_video(
        self,
        request: GenerationRequest,
        config: Config,
        cancel_check: CancelCheck | None = None,
    ) -> GenerationResult:
        """Generate a video. May raise ValidationError, ProviderError or CancellationError."""
        ...

    def upscale_image(
        self,
        image_url: str,
        config: Config,
        cancel_check: CancelCheck | None = None,
    ) -> GenerationResult:
        """Upscale an existing image. May raise ValidationError or ProviderError."""
        ...


class HttpProvider:
    """Shared plumbing for adapters that talk to a vendor over HTTPS."""

    provider_id: str = ""
    vendor_name: str = ""
    supports_video: bool = True
    supports_upscale: bool = True

    def __init__(
        self,
        descriptor: ProviderDescriptor | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.descriptor = descriptor or get_descriptor(self.provider_id)
        self._session = session

    @property
    def session(self) -> requests.Session:
        # One session per adapter for the process lifetime
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def require_credential(self, config: Config) -> str:
        credential = config.credential_for(self.provider_id)
        if not credential:
            raise ConfigurationError(
                f"{self.vendor_name} API key not found. Please set "
                f"{self.descriptor.credential_env} in your environment variables."
            )
        return credential

    def image_dimensions(self, size_token: str | None) -> tuple[int, int]:
        return dimensions_for(size_token, self.descriptor.image_sizes)

    def _send(
        self,
        method: str,
        url: str,
        config: Config,
        headers: dict[str, str],
        payload: dict[str, Any] | None = None,
    ) -> Any:
        response = _http.send(
            self.session,
            method,
            url,
            provider=self.provider_id,
            vendor_name=self.vendor_name,
            timeout=config.request_timeout,
            headers=headers,
            payload=payload,
            debug=config.debug_api,
        )
        return _http.json_body(response, self.provider_id, self.vendor_name)

    def _unsupported(self, operation: str) -> ValidationError:
        return ValidationError(
            f"{operation} is not supported by the {self.vendor_name} provider.",
            field="provider",
        )

    def generate_video(
        self,
        request: GenerationRequest,
        config: Config,
        cancel_check: CancelCheck | None = None,
    ) -> GenerationResult:
        raise self._unsupported("Video generation")

    def upscale_image(
        self,
        image_url: str,
        config: Config,
        cancel_check: CancelCheck | None = None,
    ) -> GenerationResult:
        raise self._unsupported("Upscaling")
