"""
Google Imagen generation provider.

Imagen's predict endpoint is synchronous and returns base64 image data,
which is passed back to callers as data URIs. Video and upscaling are not
offered by this provider.
"""

import time
from typing import Any

from genmedia.core.config import Config
from genmedia.core.models import GenerationRequest, GenerationResult, random_seed
from genmedia.core.outputs import decode_output, require_assets, to_assets
from genmedia.core.providers.base import CancelCheck, HttpProvider
from genmedia.core.sizes import aspect_ratio_for, clamp_num_images
from genmedia.logging_config import get_logger, log_prompts
from genmedia.utils.exceptions import UpstreamError

logger = get_logger(__name__)


class GoogleImagenProvider(HttpProvider):
    """Image generation via Google Imagen."""

    provider_id = "google"
    vendor_name = "Google Imagen"
    supports_video = False
    supports_upscale = False

    def generate_image(
        self,
        request: GenerationRequest,
        config: Config,
        cancel_check: CancelCheck | None = None,
    ) -> GenerationResult:
        api_key = self.require_credential(config)
        aspect_ratio = aspect_ratio_for(request.image_size)
        parameters: dict[str, Any] = {
            "sampleCount": clamp_num_images(request.num_images),
            "aspectRatio": aspect_ratio,
        }
        # Imagen only honours a seed when its safety filter is off
        if request.seed is not None and not request.enable_safety_checker:
            parameters["seed"] = request.seed
        payload = {"instances": [{"prompt": request.prompt}], "parameters": parameters}

        logger.info(
            "Generating image via Google Imagen samples=%s aspect_ratio=%s",
            parameters["sampleCount"],
            aspect_ratio,
        )
        if log_prompts():
            logger.info("Prompt: %s", request.prompt)

        url = f"{config.google_base_url.rstrip('/')}/models/{config.google_image_model}:predict"
        headers = {"x-goog-api-key": api_key, "Content-Type": "application/json"}
        start_time = time.time()
        result = self._send("POST", url, config, headers, payload)
        elapsed = time.time() - start_time

        if not isinstance(result, dict) or not isinstance(result.get("predictions"), list):
            raise UpstreamError(
                "Invalid response format from Google Imagen API",
                response=str(result)[:500],
                provider=self.provider_id,
            )
        assets = require_assets(
            to_assets(
                decode_output(result, self.provider_id),
                default_size=self.image_dimensions(request.image_size),
                default_content_type="image/png",
                file_prefix="generated-image-google",
            ),
            self.provider_id,
        )
        logger.info("Generated %d image(s) in %.1fs via Google Imagen", len(assets), elapsed)
        return GenerationResult(
            assets=assets,
            prompt=request.prompt,
            seed=request.seed if request.seed is not None else random_seed(),
            provider=self.provider_id,
            model_used="Imagen 4.0",
            timings={"inference": round(elapsed, 3)},
            has_nsfw_concepts=[False] * len(assets),
        )
