"""
Generation providers: protocol, registry, and built-in implementations.

Built-in providers are registered lazily on first get_registry() call to avoid
circular imports with genmedia.core.generation.
"""

from genmedia.core.providers.base import MediaProvider as MediaProvider
from genmedia.core.providers.catalog import ProviderDescriptor as ProviderDescriptor
from genmedia.core.providers.registry import (
    ProviderRegistry,
)
from genmedia.core.providers.registry import (
    get_registry as _get_registry_impl,
)
from genmedia.core.providers.registry import (
    reset_registry as _reset_registry_impl,
)

PROVIDER_REPLICATE = "replicate"
PROVIDER_FAL = "fal"
PROVIDER_GOOGLE = "google"
KNOWN_PROVIDERS = (PROVIDER_REPLICATE, PROVIDER_FAL, PROVIDER_GOOGLE)

_builtins_registered = False


def _register_builtins(reg: ProviderRegistry) -> None:
    """Register built-in providers and apply the configured default selection."""
    global _builtins_registered
    if _builtins_registered:
        return
    from genmedia.core.config import get_config
    from genmedia.core.providers.catalog import get_descriptor
    from genmedia.core.providers.fal import FalProvider
    from genmedia.core.providers.google import GoogleImagenProvider
    from genmedia.core.providers.replicate import ReplicateProvider

    for provider_id, cls in (
        (PROVIDER_REPLICATE, ReplicateProvider),
        (PROVIDER_FAL, FalProvider),
        (PROVIDER_GOOGLE, GoogleImagenProvider),
    ):
        descriptor = get_descriptor(provider_id)
        reg.register(descriptor, cls(descriptor))

    default_provider = get_config().default_provider
    if default_provider in reg.provider_ids():
        reg.set_current(default_provider)
    _builtins_registered = True


def get_registry() -> ProviderRegistry:
    """Return the global provider registry and ensure built-ins are registered."""
    reg = _get_registry_impl()
    _register_builtins(reg)
    return reg


def reset_registry() -> None:
    """Forget the global registry and selection (tests, config reloads)."""
    global _builtins_registered
    _reset_registry_impl()
    _builtins_registered = False
