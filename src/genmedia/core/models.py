"""
Request and result types shared by every provider.

A GenerationRequest is built per call (usually from a JSON body) and a
GenerationResult is returned to the caller; nothing here is retained after
the call completes.
"""

import math
import random
from dataclasses import dataclass, field
from typing import Any

from genmedia.utils.exceptions import ValidationError

DEFAULT_IMAGE_SIZE = "square_hd"
SEED_RANGE = 1_000_000


def random_seed() -> int:
    """Return a seed for results whose request did not supply one."""
    return random.randrange(SEED_RANGE)


def _as_float(payload: dict[str, Any], key: str) -> float | None:
    value = payload.get(key)
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be a number", field=key)
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError) as e:
        raise ValidationError(f"{key} must be a number", field=key) from e
    # JSON bodies may carry NaN/Infinity literals, and 1e400 parses as inf
    if not math.isfinite(number):
        raise ValidationError(f"{key} must be a finite number", field=key)
    return number


def _as_int(payload: dict[str, Any], key: str) -> int | None:
    number = _as_float(payload, key)
    if number is None:
        return None
    try:
        return int(number)
    except (ValueError, OverflowError) as e:
        raise ValidationError(f"{key} must be a finite number", field=key) from e


@dataclass
class GenerationRequest:
    """Normalized image/video generation request.

    Numeric knobs are stored as supplied; each adapter clamps them into the
    range its vendor accepts.
    """

    prompt: str
    image_size: str = DEFAULT_IMAGE_SIZE
    num_images: int | None = None
    guidance_scale: float | None = None
    num_inference_steps: int | None = None
    enable_safety_checker: bool = True
    seed: int | None = None
    # Video only
    image_url: str | None = None
    video_length: int | None = None
    fps: int | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "GenerationRequest":
        """
        Build a request from a decoded JSON body.

        The prompt is not checked here; see validate_prompt().

        Raises:
            ValidationError: If a field has the wrong type
        """
        prompt = payload.get("prompt")
        if prompt is not None and not isinstance(prompt, str):
            raise ValidationError("prompt must be a string", field="prompt")
        image_size = payload.get("image_size") or DEFAULT_IMAGE_SIZE
        if not isinstance(image_size, str):
            raise ValidationError("image_size must be a string", field="image_size")
        image_url = payload.get("image_url") or None
        if image_url is not None and not isinstance(image_url, str):
            raise ValidationError("image_url must be a string", field="image_url")
        safety = payload.get("enable_safety_checker", True)
        return cls(
            prompt=prompt or "",
            image_size=image_size,
            num_images=_as_int(payload, "num_images"),
            guidance_scale=_as_float(payload, "guidance_scale"),
            num_inference_steps=_as_int(payload, "num_inference_steps"),
            enable_safety_checker=True if safety is None else bool(safety),
            seed=_as_int(payload, "seed"),
            image_url=image_url,
            video_length=_as_int(payload, "video_length"),
            fps=_as_int(payload, "fps"),
        )


def validate_prompt(prompt: str | None) -> str:
    """
    Return the prompt if it is non-empty after trimming.

    Raises:
        ValidationError: If the prompt is missing or blank
    """
    if not prompt or not prompt.strip():
        raise ValidationError("Prompt is required", field="prompt")
    return prompt


@dataclass(frozen=True)
class GeneratedAsset:
    """One generated image or video."""

    url: str  # remote URL or data: URI
    width: int
    height: int
    content_type: str
    file_name: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "width": self.width,
            "height": self.height,
            "content_type": self.content_type,
            "file_name": self.file_name,
        }


@dataclass
class GenerationResult:
    """Normalized result of a generation call. Never has an empty asset list."""

    assets: tuple[GeneratedAsset, ...]
    prompt: str
    seed: int
    provider: str
    model_used: str
    timings: dict[str, float] = field(default_factory=dict)
    has_nsfw_concepts: list[bool] = field(default_factory=list)
    duration: float | None = None  # video only, seconds
    fps: int | None = None  # video only

    @property
    def first(self) -> GeneratedAsset:
        return self.assets[0]

    def to_image_payload(self) -> dict[str, Any]:
        """Body returned by the image endpoints."""
        return {
            "images": [asset.to_dict() for asset in self.assets],
            "prompt": self.prompt,
            "seed": self.seed,
            "timings": dict(self.timings),
            "has_nsfw_concepts": list(self.has_nsfw_concepts)
            or [False] * len(self.assets),
            "provider": self.provider,
        }

    def to_video_payload(self) -> dict[str, Any]:
        """Body returned by the video endpoint."""
        video = self.first
        return {
            "url": video.url,
            "width": video.width,
            "height": video.height,
            "duration": self.duration,
            "fps": self.fps,
            "prompt": self.prompt,
            "seed": self.seed,
            "provider": self.provider,
        }
