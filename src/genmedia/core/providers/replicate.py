"""
Replicate generation provider.

Uses the predictions API: create a prediction for a model version, then poll
it until it leaves the starting/processing states.
"""

import time
from typing import Any

from genmedia.core.config import Config
from genmedia.core.models import GenerationRequest, GenerationResult, random_seed
from genmedia.core.outputs import decode_output, require_assets, to_assets
from genmedia.core.polling import PollPolicy, poll_until_complete
from genmedia.core.providers.base import CancelCheck, HttpProvider
from genmedia.core.sizes import (
    aspect_ratio_for,
    clamp_guidance,
    clamp_num_images,
    clamp_range,
    clamp_steps,
)
from genmedia.logging_config import get_logger, log_context, log_prompts
from genmedia.utils.exceptions import UpstreamError

logger = get_logger(__name__)

PENDING_STATUSES = frozenset({"starting", "processing"})
SUCCEEDED = "succeeded"

# Zeroscope renders at a fixed size and at most 24 frames
_VIDEO_SIZE = (1024, 576)
_MAX_TEXT_TO_VIDEO_FRAMES = 24
_SVD_FRAMES = 14
_UPSCALE_SIZE = (4096, 4096)


class ReplicateProvider(HttpProvider):
    """Image and video generation via Replicate predictions."""

    provider_id = "replicate"
    vendor_name = "Replicate"

    def _headers(self, token: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    def _run_prediction(
        self,
        version: str,
        model_input: dict[str, Any],
        config: Config,
        cancel_check: CancelCheck | None,
    ) -> tuple[dict[str, Any], float]:
        """Create a prediction and wait for it. Returns (prediction, elapsed seconds)."""
        headers = self._headers(self.require_credential(config))
        base_url = config.replicate_base_url.rstrip("/")
        start_time = time.time()
        prediction = self._send(
            "POST",
            f"{base_url}/predictions",
            config,
            headers,
            {"version": version, "input": model_input},
        )
        if not isinstance(prediction, dict) or not prediction.get("id"):
            raise UpstreamError(
                "Replicate did not return a prediction id",
                response=str(prediction)[:500],
                provider=self.provider_id,
            )
        prediction_id = prediction["id"]
        logger.info("Replicate prediction created: %s", prediction_id)

        with log_context(job=prediction_id):
            prediction = poll_until_complete(
                prediction,
                lambda: self._send("GET", f"{base_url}/predictions/{prediction_id}", config, headers),
                status_of=lambda p: str(p.get("status", "")),
                pending=PENDING_STATUSES,
                policy=PollPolicy.from_config(config),
                cancel_check=cancel_check,
                provider=self.provider_id,
                label=f"Replicate prediction {prediction_id}",
            )
        elapsed = time.time() - start_time

        status = prediction.get("status")
        if status != SUCCEEDED:
            error = prediction.get("error") or f"prediction {status}"
            logger.error("Replicate prediction %s failed: %s", prediction_id, error)
            raise UpstreamError(
                f"Generation failed: {error}",
                response=str(error),
                provider=self.provider_id,
            )
        return prediction, elapsed

    @staticmethod
    def _timings(prediction: dict[str, Any], elapsed: float) -> dict[str, float]:
        metrics = prediction.get("metrics") or {}
        inference = metrics.get("predict_time")
        return {"inference": float(inference) if inference is not None else round(elapsed, 3)}

    def generate_image(
        self,
        request: GenerationRequest,
        config: Config,
        cancel_check: CancelCheck | None = None,
    ) -> GenerationResult:
        """Generate images with SDXL."""
        aspect_ratio = aspect_ratio_for(request.image_size)
        model_input: dict[str, Any] = {
            "prompt": request.prompt,
            "num_outputs": clamp_num_images(request.num_images),
            "aspect_ratio": aspect_ratio,
            "guidance_scale": clamp_guidance(request.guidance_scale, 7.5),
            "num_inference_steps": clamp_steps(request.num_inference_steps, 25),
            "disable_safety_checker": not request.enable_safety_checker,
            "output_format": "webp",
            "output_quality": 80,
        }
        if request.seed is not None:
            model_input["seed"] = request.seed

        logger.info(
            "Generating image via Replicate outputs=%s aspect_ratio=%s",
            model_input["num_outputs"],
            aspect_ratio,
        )
        if log_prompts():
            logger.info("Prompt: %s", request.prompt)

        prediction, elapsed = self._run_prediction(
            config.replicate_image_version, model_input, config, cancel_check
        )
        assets = require_assets(
            to_assets(
                decode_output(prediction.get("output"), self.provider_id),
                default_size=self.image_dimensions(request.image_size),
                default_content_type="image/webp",
                file_prefix="generated-image",
            ),
            self.provider_id,
        )
        logger.info("Generated %d image(s) in %.1fs via Replicate", len(assets), elapsed)
        return GenerationResult(
            assets=assets,
            prompt=request.prompt,
            seed=request.seed if request.seed is not None else random_seed(),
            provider=self.provider_id,
            model_used="SDXL",
            timings=self._timings(prediction, elapsed),
            has_nsfw_concepts=[False] * len(assets),
        )

    def generate_video(
        self,
        request: GenerationRequest,
        config: Config,
        cancel_check: CancelCheck | None = None,
    ) -> GenerationResult:
        """Text-to-video with Zeroscope, or image-to-video with Stable Video Diffusion."""
        fps = clamp_range("fps", request.fps, 6, 1, 30)
        if request.image_url:
            version = config.replicate_image_to_video_version
            model_used = "Stable Video Diffusion"
            frames = _SVD_FRAMES
            model_input: dict[str, Any] = {
                "input_image": request.image_url,
                "video_length": "14_frames_with_svd",
                "sizing_strategy": "maintain_aspect_ratio",
                "frames_per_second": fps,
                "motion_bucket_id": 127,
                "cond_aug": 0.02,
            }
        else:
            version = config.replicate_text_to_video_version
            model_used = "Zeroscope V2 XL"
            frames = clamp_range(
                "video_length", request.video_length, _SVD_FRAMES, 1, _MAX_TEXT_TO_VIDEO_FRAMES
            )
            model_input = {
                "prompt": request.prompt,
                "width": _VIDEO_SIZE[0],
                "height": _VIDEO_SIZE[1],
                "batch_size": 1,
                "num_frames": frames,
                "num_inference_steps": clamp_steps(request.num_inference_steps, 25),
                "guidance_scale": clamp_guidance(request.guidance_scale, 7.5),
                "fps": fps,
            }
        if request.seed is not None:
            model_input["seed"] = request.seed

        logger.info("Generating video via Replicate model=%s frames=%s", model_used, frames)
        if log_prompts():
            logger.info("Prompt: %s", request.prompt)

        prediction, elapsed = self._run_prediction(version, model_input, config, cancel_check)
        assets = require_assets(
            to_assets(
                decode_output(prediction.get("output"), self.provider_id),
                default_size=_VIDEO_SIZE,
                default_content_type="video/mp4",
                file_prefix="generated-video",
            ),
            self.provider_id,
        )
        logger.info("Generated video in %.1fs via Replicate", elapsed)
        return GenerationResult(
            assets=assets[:1],
            prompt=request.prompt,
            seed=request.seed if request.seed is not None else random_seed(),
            provider=self.provider_id,
            model_used=model_used,
            timings=self._timings(prediction, elapsed),
            duration=round(frames / fps, 2),
            fps=fps,
        )

    def upscale_image(
        self,
        image_url: str,
        config: Config,
        cancel_check: CancelCheck | None = None,
    ) -> GenerationResult:
        """Upscale 4x with Real-ESRGAN."""
        logger.info("Upscaling image via Replicate")
        prediction, elapsed = self._run_prediction(
            config.replicate_upscale_version,
            {"image": image_url, "scale": 4},
            config,
            cancel_check,
        )
        assets = require_assets(
            to_assets(
                decode_output(prediction.get("output"), self.provider_id),
                default_size=_UPSCALE_SIZE,
                default_content_type="image/jpeg",
                file_prefix="upscaled-image",
            ),
            self.provider_id,
        )
        return GenerationResult(
            assets=assets[:1],
            prompt="",
            seed=0,
            provider=self.provider_id,
            model_used="Real-ESRGAN",
            timings=self._timings(prediction, elapsed),
        )
