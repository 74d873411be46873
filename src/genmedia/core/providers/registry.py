"""
Registry for generation providers.

Maps provider ids (e.g. "replicate", "fal", "google") to descriptors and
adapter implementations, and holds the process-wide current selection.
"""

from genmedia.core.providers.base import MediaProvider
from genmedia.core.providers.catalog import ProviderDescriptor
from genmedia.logging_config import get_logger
from genmedia.utils.exceptions import ValidationError

logger = get_logger(__name__)


class ProviderRegistry:
    """Registry mapping provider id to descriptor and MediaProvider implementation.

    The current selection is a plain attribute: the last set_current() wins and
    is read by resolve() at call time. Callers that must not be affected by a
    concurrent switch pass the provider id explicitly.
    """

    def __init__(self) -> None:
        self._impls: dict[str, MediaProvider] = {}
        self._descriptors: dict[str, ProviderDescriptor] = {}
        self._current: str | None = None

    def register(self, descriptor: ProviderDescriptor, impl: MediaProvider) -> None:
        """Register a provider implementation. Idempotent for the same id."""
        self._descriptors[descriptor.id] = descriptor
        self._impls[descriptor.id] = impl
        if self._current is None:
            self._current = descriptor.id

    def get(self, provider_id: str) -> MediaProvider | None:
        """Return the registered implementation for provider_id, or None if unknown."""
        return self._impls.get(provider_id)

    def descriptor(self, provider_id: str) -> ProviderDescriptor | None:
        """Return the descriptor for provider_id, or None if unknown."""
        return self._descriptors.get(provider_id)

    def descriptors(self) -> list[ProviderDescriptor]:
        """Return all descriptors in registration order."""
        return list(self._descriptors.values())

    def provider_ids(self) -> list[str]:
        """Return the list of registered provider ids."""
        return list(self._impls.keys())

    def _require_known(self, provider_id: str) -> None:
        if provider_id not in self._impls:
            raise ValidationError(
                f"Unknown provider: {provider_id!r}. "
                f"Must be one of: {', '.join(self.provider_ids())}.",
                field="provider",
            )

    @property
    def current_id(self) -> str:
        if self._current is None:
            raise ValidationError("No providers are registered.", field="provider")
        return self._current

    def get_current(self) -> ProviderDescriptor:
        """Return the descriptor of the currently selected provider."""
        return self._descriptors[self.current_id]

    def set_current(self, provider_id: str) -> None:
        """Switch the process-wide selection. Only checks that the id is registered."""
        self._require_known(provider_id)
        self._current = provider_id
        logger.info("Switched to provider: %s", self._descriptors[provider_id].display_name)

    def resolve(self, provider_id: str | None = None) -> MediaProvider:
        """Return the adapter for provider_id, or for the current selection when omitted."""
        effective = provider_id if provider_id is not None else self.current_id
        self._require_known(effective)
        return self._impls[effective]


_registry: ProviderRegistry | None = None


def get_registry() -> ProviderRegistry:
    """Return the global provider registry. Creates it on first call."""
    global _registry
    if _registry is None:
        _registry = ProviderRegistry()
    return _registry


def reset_registry() -> None:
    """Drop the global registry so the next get_registry() starts fresh."""
    global _registry
    _registry = None
