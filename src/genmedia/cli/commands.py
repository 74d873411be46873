"""
Click command definitions for the genmedia CLI.

This module contains the Click command group and all CLI commands
(serve, image, video, upscale, providers).
"""

from collections.abc import Callable
from typing import Any

import click

from genmedia import (
    Config,
    GenerationRequest,
    GenerationResult,
    __version__,
    generate_image,
    generate_video,
    get_registry,
    upscale_image,
)
from genmedia.cli import progress
from genmedia.cli.handlers import (
    cancel_check,
    install_sigint_handler,
    reset_cancellation,
    restore_sigint_handler,
    run_with_error_handling,
)
from genmedia.cli.utils import format_json
from genmedia.core.providers import KNOWN_PROVIDERS
from genmedia.core.sizes import SIZE_TOKENS
from genmedia.logging_config import configure_logging, get_verbosity_from_env


@click.group(
    help=f"""Proxy and CLI for hosted image and video generation (Replicate, fal.ai, Google Imagen).

\b
Version: {__version__}
"""
)
@click.version_option(version=__version__, package_name="genmedia")
@click.pass_context
def cli(ctx: click.Context) -> None:
    ctx.color = True


def _common_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by every generation command."""
    fn = click.option(
        "--debug-api",
        is_flag=True,
        help="Log vendor request payload and response (image data truncated).",
    )(fn)
    fn = click.option(
        "--verbose",
        "-v",
        "verbose_count",
        count=True,
        help="Increase verbosity: -v also show prompts, -vv show vendor calls and polling.",
    )(fn)
    fn = click.option(
        "--quiet",
        "-q",
        is_flag=True,
        help="No progress output; only print the JSON result or errors.",
    )(fn)
    fn = click.option(
        "--api-key",
        help="Credential for the selected provider (overrides its environment variable).",
    )(fn)
    fn = click.option(
        "--provider",
        type=click.Choice(KNOWN_PROVIDERS, case_sensitive=False),
        default=None,
        help="Provider to use (default: GENMEDIA_DEFAULT_PROVIDER or replicate).",
    )(fn)
    return fn


def _run_generation(
    kind: str,
    provider: str | None,
    api_key: str | None,
    quiet: bool,
    verbose_count: int,
    debug_api: bool,
    call: Callable[[str, Config], GenerationResult],
    render: Callable[[GenerationResult], dict[str, Any]],
) -> None:
    """Shared flow: configure logging/config, run with a spinner, print JSON to stdout."""
    # Reset cancel event for this run (in case CLI is invoked again in same process)
    reset_cancellation()

    # Apply logging verbosity: CLI flags override GENMEDIA_VERBOSITY
    verbose_level = min(verbose_count, 2) if verbose_count > 0 else get_verbosity_from_env()
    configure_logging(verbose_level=verbose_level, quiet=quiet)

    def do_generate() -> None:
        config = Config.from_env()
        if debug_api:
            config.debug_api = True
        config.validate()

        registry = get_registry()
        provider_eff = provider.lower() if provider else registry.current_id
        if api_key is not None:
            config.set_credential(provider_eff, api_key)

        if quiet:
            result = call(provider_eff, config)
        else:
            descriptor = registry.descriptor(provider_eff)
            name = descriptor.display_name if descriptor else provider_eff
            with progress.generation_progress(kind, name):
                result = call(provider_eff, config)
            progress.print_success_result(kind, result)
        click.echo(format_json(render(result)))

    # Install SIGINT handler for cancellation
    old_sigint = install_sigint_handler()
    try:
        run_with_error_handling(do_generate, quiet=quiet)
    finally:
        restore_sigint_handler(old_sigint)


@cli.command()
@click.option("--prompt", "-p", required=True, help="Text description of the image.")
@click.option(
    "--size",
    "image_size",
    type=click.Choice(SIZE_TOKENS),
    default="square_hd",
    show_default=True,
    help="Abstract image size.",
)
@click.option("--num-images", "-n", type=int, default=None, help="Images to generate (1-4).")
@click.option("--steps", type=int, default=None, help="Inference steps (1-50).")
@click.option("--guidance", type=float, default=None, help="Guidance scale (1-20).")
@click.option("--seed", type=int, default=None, help="Seed for reproducible output.")
@click.option("--no-safety", is_flag=True, help="Disable the vendor safety checker.")
@_common_options
def image(
    prompt: str,
    image_size: str,
    num_images: int | None,
    steps: int | None,
    guidance: float | None,
    seed: int | None,
    no_safety: bool,
    provider: str | None,
    api_key: str | None,
    quiet: bool,
    verbose_count: int,
    debug_api: bool,
) -> None:
    """Generate images from a text prompt and print the normalized JSON result."""
    request = GenerationRequest(
        prompt=prompt,
        image_size=image_size,
        num_images=num_images,
        guidance_scale=guidance,
        num_inference_steps=steps,
        enable_safety_checker=not no_safety,
        seed=seed,
    )
    _run_generation(
        "image",
        provider,
        api_key,
        quiet,
        verbose_count,
        debug_api,
        lambda provider_id, config: generate_image(
            request, provider=provider_id, config=config, cancel_check=cancel_check
        ),
        GenerationResult.to_image_payload,
    )


@cli.command()
@click.option("--prompt", "-p", required=True, help="Text description of the video.")
@click.option("--image-url", default=None, help="Source image for image-to-video.")
@click.option("--length", "video_length", type=int, default=None, help="Frames or seconds.")
@click.option("--fps", type=int, default=None, help="Frames per second.")
@click.option("--steps", type=int, default=None, help="Inference steps (1-50).")
@click.option("--guidance", type=float, default=None, help="Guidance scale (1-20).")
@click.option("--seed", type=int, default=None, help="Seed for reproducible output.")
@_common_options
def video(
    prompt: str,
    image_url: str | None,
    video_length: int | None,
    fps: int | None,
    steps: int | None,
    guidance: float | None,
    seed: int | None,
    provider: str | None,
    api_key: str | None,
    quiet: bool,
    verbose_count: int,
    debug_api: bool,
) -> None:
    """Generate a video and print the normalized JSON result."""
    request = GenerationRequest(
        prompt=prompt,
        image_url=image_url,
        video_length=video_length,
        fps=fps,
        num_inference_steps=steps,
        guidance_scale=guidance,
        seed=seed,
    )
    _run_generation(
        "video",
        provider,
        api_key,
        quiet,
        verbose_count,
        debug_api,
        lambda provider_id, config: generate_video(
            request, provider=provider_id, config=config, cancel_check=cancel_check
        ),
        GenerationResult.to_video_payload,
    )


@cli.command()
@click.argument("image_url")
@_common_options
def upscale(
    image_url: str,
    provider: str | None,
    api_key: str | None,
    quiet: bool,
    verbose_count: int,
    debug_api: bool,
) -> None:
    """Upscale IMAGE_URL 4x and print the resulting asset as JSON."""
    _run_generation(
        "upscale",
        provider,
        api_key,
        quiet,
        verbose_count,
        debug_api,
        lambda provider_id, config: upscale_image(
            image_url, provider=provider_id, config=config, cancel_check=cancel_check
        ),
        lambda result: {"image": result.first.to_dict(), "provider": result.provider},
    )


@cli.command()
def providers() -> None:
    """List providers and mark the default selection."""
    registry = get_registry()
    progress.print_providers(registry.descriptors(), registry.current_id)


@cli.command()
@click.option(
    "--host",
    default="127.0.0.1",
    envvar="GENMEDIA_HOST",
    show_default=True,
    help="Host to bind. Use 0.0.0.0 for LAN.",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=8000,
    envvar="GENMEDIA_PORT",
    show_default=True,
    help="Port to bind.",
)
@click.option("--reload", is_flag=True, help="Reload on code changes (development).")
def serve(host: str, port: int, reload: bool) -> None:
    """Run the HTTP proxy."""
    import uvicorn

    configure_logging(verbose_level=get_verbosity_from_env(), quiet=False)
    progress.print_info(f"Serving genmedia on http://{host}:{port}")
    uvicorn.run(
        "genmedia.server.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


def main() -> None:
    """Entry point for the genmedia console script."""
    cli()


__all__ = ["cli", "main", "image", "video", "upscale", "providers", "serve"]
