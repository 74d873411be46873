"""
Load provider descriptors from the bundled providers.yaml file.

Descriptors are static metadata (display name, availability, models, size
tables) defined in src/genmedia/providers.yaml and loaded once per process.
"""

import importlib.resources
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from genmedia.core.sizes import SIZE_TOKENS
from genmedia.utils.exceptions import ConfigurationError

AvailabilityStatus = Literal["available", "requires_credits", "error"]


class VideoLength(BaseModel):
    """One selectable video length (frames or seconds, vendor dependent)."""

    model_config = ConfigDict(frozen=True)

    value: int
    label: str


class ProviderModels(BaseModel):
    model_config = ConfigDict(frozen=True)

    image: tuple[str, ...] = ()
    video: tuple[str, ...] = ()


class ProviderDescriptor(BaseModel):
    """Static metadata for one provider."""

    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str = Field(..., min_length=1)
    description: str = ""
    availability_status: AvailabilityStatus = "available"
    credential_env: str = Field(..., min_length=1)
    models: ProviderModels = ProviderModels()
    image_sizes: dict[str, tuple[int, int]]
    video_lengths: tuple[VideoLength, ...] = ()

    @model_validator(mode="after")
    def _all_size_tokens_present(self) -> "ProviderDescriptor":
        missing = [token for token in SIZE_TOKENS if token not in self.image_sizes]
        if missing:
            raise ValueError(f"image_sizes is missing tokens: {', '.join(missing)}")
        return self

    @property
    def supported_image_models(self) -> tuple[str, ...]:
        return self.models.image

    @property
    def supported_video_models(self) -> tuple[str, ...]:
        return self.models.video

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly view used by the /providers endpoint."""
        return {
            "id": self.id,
            "name": self.display_name,
            "description": self.description,
            "status": self.availability_status,
            "models": {
                "image": list(self.supported_image_models),
                "video": list(self.supported_video_models),
            },
            "image_sizes": [
                {"value": token, "width": size[0], "height": size[1]}
                for token, size in self.image_sizes.items()
            ],
            "video_lengths": [length.model_dump() for length in self.video_lengths],
        }


# Module-level cache for parsed descriptors
_descriptors: dict[str, ProviderDescriptor] | None = None


def _read_catalog() -> str:
    try:
        with (
            importlib.resources.files("genmedia")
            .joinpath("providers.yaml")
            .open(encoding="utf-8") as f
        ):
            return f.read()
    except FileNotFoundError as e:
        raise ConfigurationError(
            "providers.yaml not found. This file is required and should be bundled "
            "with the package."
        ) from e


def parse_descriptors(raw: str) -> dict[str, ProviderDescriptor]:
    """
    Parse providers.yaml content into descriptors keyed by provider id.

    Raises:
        ConfigurationError: If YAML is malformed or fails validation.
    """
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Failed to parse providers.yaml: {e}. Check YAML syntax and formatting."
        ) from e

    if not isinstance(data, dict) or not isinstance(data.get("providers"), dict):
        raise ConfigurationError("providers.yaml must contain a 'providers' mapping.")

    descriptors: dict[str, ProviderDescriptor] = {}
    for provider_id, entry in data["providers"].items():
        try:
            descriptors[provider_id] = ProviderDescriptor(id=provider_id, **(entry or {}))
        except (ValidationError, TypeError) as e:
            raise ConfigurationError(f"Invalid providers.yaml entry {provider_id!r}: {e}") from e
    return descriptors


def load_descriptors() -> dict[str, ProviderDescriptor]:
    """Return all descriptors from the bundled catalog. Cached after first call."""
    global _descriptors
    if _descriptors is None:
        _descriptors = parse_descriptors(_read_catalog())
    return _descriptors


def get_descriptor(provider_id: str) -> ProviderDescriptor:
    """
    Return the descriptor for one provider.

    Raises:
        ConfigurationError: If the catalog has no such provider
    """
    descriptors = load_descriptors()
    if provider_id not in descriptors:
        raise ConfigurationError(f"providers.yaml has no entry for {provider_id!r}.")
    return descriptors[provider_id]
