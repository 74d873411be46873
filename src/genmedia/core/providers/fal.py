"""
fal.ai generation provider.

Uses the fal queue API: submit to queue.fal.run/<application>, poll the
returned status URL while the request is queued or running, then fetch the
result from the response URL.
"""

import time
from typing import Any

from genmedia.core.config import Config
from genmedia.core.models import GenerationRequest, GenerationResult, random_seed
from genmedia.core.outputs import decode_output, require_assets, to_assets
from genmedia.core.polling import PollPolicy, poll_until_complete
from genmedia.core.providers.base import CancelCheck, HttpProvider
from genmedia.core.sizes import (
    ASPECT_RATIOS,
    clamp_guidance,
    clamp_num_images,
    clamp_range,
    clamp_steps,
)
from genmedia.logging_config import get_logger, log_context, log_prompts
from genmedia.utils.exceptions import UpstreamError

logger = get_logger(__name__)

PENDING_STATUSES = frozenset({"IN_QUEUE", "IN_PROGRESS"})
COMPLETED = "COMPLETED"

# fal video models render 720p; Kling accepts 5 or 10 second clips
_VIDEO_SIZE = (1280, 720)
_VIDEO_FPS = 24
_KLING_DURATIONS = (5, 10)
_MINIMAX_DURATION = 6
_UPSCALE_SIZE = (4096, 4096)


class FalProvider(HttpProvider):
    """Image and video generation via the fal.ai queue."""

    provider_id = "fal"
    vendor_name = "fal.ai"

    def _headers(self, key: str) -> dict[str, str]:
        return {
            "Authorization": f"Key {key}",
            "Content-Type": "application/json",
        }

    def _run(
        self,
        application: str,
        arguments: dict[str, Any],
        config: Config,
        cancel_check: CancelCheck | None,
    ) -> tuple[dict[str, Any], float]:
        """Submit to the queue and wait for the result. Returns (result, elapsed seconds)."""
        headers = self._headers(self.require_credential(config))
        queue_url = config.fal_queue_url.rstrip("/")
        start_time = time.time()
        submitted = self._send("POST", f"{queue_url}/{application}", config, headers, arguments)
        if not isinstance(submitted, dict) or not submitted.get("request_id"):
            raise UpstreamError(
                "fal.ai did not return a request id",
                response=str(submitted)[:500],
                provider=self.provider_id,
            )
        request_id = submitted["request_id"]
        base = f"{queue_url}/{application}/requests/{request_id}"
        status_url = submitted.get("status_url") or f"{base}/status"
        response_url = submitted.get("response_url") or base
        logger.info("fal.ai request queued: %s (%s)", request_id, application)

        with log_context(job=request_id):
            job = poll_until_complete(
                submitted,
                lambda: self._send("GET", status_url, config, headers),
                status_of=lambda j: str(j.get("status", "")),
                pending=PENDING_STATUSES,
                policy=PollPolicy.from_config(config),
                cancel_check=cancel_check,
                provider=self.provider_id,
                label=f"fal.ai request {request_id}",
            )
        status = job.get("status")
        if status != COMPLETED:
            error = job.get("error") or f"request {status}"
            logger.error("fal.ai request %s failed: %s", request_id, error)
            raise UpstreamError(
                f"Generation failed: {error}", response=str(job)[:500], provider=self.provider_id
            )

        result = self._send("GET", response_url, config, headers)
        elapsed = time.time() - start_time
        if not isinstance(result, dict):
            raise UpstreamError(
                "Unexpected fal.ai result", response=str(result)[:500], provider=self.provider_id
            )
        if result.get("detail") and not (result.get("images") or result.get("video")):
            raise UpstreamError(
                f"Generation failed: {result['detail']}",
                response=str(result["detail"]),
                provider=self.provider_id,
            )
        return result, elapsed

    @staticmethod
    def _timings(result: dict[str, Any], elapsed: float) -> dict[str, float]:
        timings = result.get("timings")
        if isinstance(timings, dict) and timings:
            return {k: float(v) for k, v in timings.items() if isinstance(v, (int, float))}
        return {"inference": round(elapsed, 3)}

    def generate_image(
        self,
        request: GenerationRequest,
        config: Config,
        cancel_check: CancelCheck | None = None,
    ) -> GenerationResult:
        """Generate images with FLUX.1 [dev]. fal takes the size token natively."""
        image_size = request.image_size if request.image_size in ASPECT_RATIOS else "square_hd"
        arguments: dict[str, Any] = {
            "prompt": request.prompt,
            "image_size": image_size,
            "num_inference_steps": clamp_steps(request.num_inference_steps, 28),
            "guidance_scale": clamp_guidance(request.guidance_scale, 3.5),
            "num_images": clamp_num_images(request.num_images),
            "enable_safety_checker": request.enable_safety_checker,
        }
        if request.seed is not None:
            arguments["seed"] = request.seed

        logger.info(
            "Generating image via fal.ai images=%s size=%s", arguments["num_images"], image_size
        )
        if log_prompts():
            logger.info("Prompt: %s", request.prompt)

        result, elapsed = self._run(config.fal_image_model, arguments, config, cancel_check)
        assets = require_assets(
            to_assets(
                decode_output(result, self.provider_id),
                default_size=self.image_dimensions(image_size),
                default_content_type="image/jpeg",
                file_prefix="generated-image",
            ),
            self.provider_id,
        )
        seed = result.get("seed")
        if not isinstance(seed, int):
            seed = request.seed if request.seed is not None else random_seed()
        nsfw = result.get("has_nsfw_concepts")
        logger.info("Generated %d image(s) in %.1fs via fal.ai", len(assets), elapsed)
        return GenerationResult(
            assets=assets,
            prompt=result.get("prompt") or request.prompt,
            seed=seed,
            provider=self.provider_id,
            model_used="FLUX.1 [dev]",
            timings=self._timings(result, elapsed),
            has_nsfw_concepts=[bool(x) for x in nsfw] if isinstance(nsfw, list) else [],
        )

    def generate_video(
        self,
        request: GenerationRequest,
        config: Config,
        cancel_check: CancelCheck | None = None,
    ) -> GenerationResult:
        """Text-to-video with MiniMax, or image-to-video with Kling."""
        if request.image_url:
            application = config.fal_image_to_video_model
            model_used = "Kling Video"
            longest = _KLING_DURATIONS[-1]
            duration = longest if (request.video_length or 0) >= longest else _KLING_DURATIONS[0]
            arguments: dict[str, Any] = {
                "prompt": request.prompt,
                "image_url": request.image_url,
                "duration": str(duration),
                "cfg_scale": 0.5,
                "negative_prompt": "blur, distort, and low quality",
            }
        else:
            application = config.fal_text_to_video_model
            model_used = "MiniMax Video"
            duration = _MINIMAX_DURATION
            arguments = {"prompt": request.prompt, "prompt_optimizer": True}

        logger.info("Generating video via fal.ai model=%s", model_used)
        if log_prompts():
            logger.info("Prompt: %s", request.prompt)

        result, elapsed = self._run(application, arguments, config, cancel_check)
        assets = require_assets(
            to_assets(
                decode_output(result, self.provider_id),
                default_size=_VIDEO_SIZE,
                default_content_type="video/mp4",
                file_prefix="generated-video",
            ),
            self.provider_id,
        )
        logger.info("Generated video in %.1fs via fal.ai", elapsed)
        return GenerationResult(
            assets=assets[:1],
            prompt=request.prompt,
            seed=request.seed if request.seed is not None else random_seed(),
            provider=self.provider_id,
            model_used=model_used,
            timings=self._timings(result, elapsed),
            duration=float(duration),
            fps=clamp_range("fps", request.fps, _VIDEO_FPS, 1, 60),
        )

    def upscale_image(
        self,
        image_url: str,
        config: Config,
        cancel_check: CancelCheck | None = None,
    ) -> GenerationResult:
        """Upscale 4x with ESRGAN."""
        logger.info("Upscaling image via fal.ai")
        result, elapsed = self._run(
            config.fal_upscale_model, {"image_url": image_url, "scale": 4}, config, cancel_check
        )
        assets = require_assets(
            to_assets(
                decode_output(result, self.provider_id),
                default_size=_UPSCALE_SIZE,
                default_content_type="image/png",
                file_prefix="upscaled-image",
            ),
            self.provider_id,
        )
        return GenerationResult(
            assets=assets[:1],
            prompt="",
            seed=0,
            provider=self.provider_id,
            model_used="ESRGAN",
            timings=self._timings(result, elapsed),
        )
