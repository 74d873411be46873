"""Generation endpoints.

POST /generate-image         - Images from the requested or current provider
POST /generate-image-google  - Images from Google Imagen
POST /generate-video         - Video from the requested or current provider
POST /upscale-image          - 4x upscale of an existing image
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request

from genmedia.core import generation
from genmedia.core.models import GenerationRequest
from genmedia.core.providers import PROVIDER_GOOGLE
from genmedia.logging_config import get_logger, log_prompts
from genmedia.server.routes._common import (
    app_config,
    provider_for,
    read_json_body,
    run_cancellable,
)

logger = get_logger(__name__)

router = APIRouter()


async def _generate_images(request: Request, provider: str | None) -> dict[str, Any]:
    payload = await read_json_body(request)
    provider = provider or provider_for(payload)
    gen_request = GenerationRequest.from_payload(payload)
    config = app_config(request)

    logger.info("Image request provider=%s", provider)
    if log_prompts():
        logger.info("Prompt: %s", gen_request.prompt)

    result = await run_cancellable(
        request,
        lambda cancel_check: generation.generate_image(
            gen_request, provider=provider, config=config, cancel_check=cancel_check
        ),
    )
    return result.to_image_payload()


@router.post("/generate-image")
async def generate_image(request: Request) -> dict[str, Any]:
    """Generate images.

    Body: ``{prompt, image_size?, num_images?, guidance_scale?,
    num_inference_steps?, enable_safety_checker?, seed?, provider?}``.
    """
    return await _generate_images(request, None)


@router.post("/generate-image-google")
async def generate_image_google(request: Request) -> dict[str, Any]:
    """Generate images with Google Imagen regardless of the current selection."""
    return await _generate_images(request, PROVIDER_GOOGLE)


@router.post("/generate-video")
async def generate_video(request: Request) -> dict[str, Any]:
    """Generate a video.

    Body: ``{prompt, image_url?, video_length?, fps?, guidance_scale?,
    num_inference_steps?, seed?, provider?}``.
    """
    payload = await read_json_body(request)
    provider = provider_for(payload)
    gen_request = GenerationRequest.from_payload(payload)
    config = app_config(request)

    logger.info(
        "Video request provider=%s mode=%s",
        provider,
        "image-to-video" if gen_request.image_url else "text-to-video",
    )
    result = await run_cancellable(
        request,
        lambda cancel_check: generation.generate_video(
            gen_request, provider=provider, config=config, cancel_check=cancel_check
        ),
    )
    return result.to_video_payload()


@router.post("/upscale-image")
async def upscale_image(request: Request) -> dict[str, Any]:
    """Upscale an image. Body: ``{image_url, provider?}``."""
    payload = await read_json_body(request)
    provider = provider_for(payload)
    image_url = payload.get("image_url")
    config = app_config(request)

    result = await run_cancellable(
        request,
        lambda cancel_check: generation.upscale_image(
            image_url if isinstance(image_url, str) else None,
            provider=provider,
            config=config,
            cancel_check=cancel_check,
        ),
    )
    return {"image": result.first.to_dict(), "provider": result.provider}
