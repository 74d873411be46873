#!/usr/bin/env python
"""
Generate a sample image through one provider and save it locally.

Usage:
    python scripts/generate_sample.py [--provider ID] [--output FILE] [--prompt TEXT]
"""

import argparse
import base64
import sys
from pathlib import Path

import requests

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from genmedia.core.config import Config
from genmedia.core.generation import generate_image
from genmedia.core.models import GenerationRequest
from genmedia.core.providers import KNOWN_PROVIDERS
from genmedia.utils.exceptions import GenmediaError


def _asset_bytes(url: str, timeout: int) -> bytes:
    if url.startswith("data:"):
        return base64.b64decode(url.partition(",")[2])
    response = requests.get(url, timeout=timeout)
    response.raise_for_status()
    return response.content


def main() -> None:
    """Generate a sample image."""
    parser = argparse.ArgumentParser(description="Generate a sample image")
    parser.add_argument("--provider", choices=KNOWN_PROVIDERS, default="replicate")
    parser.add_argument(
        "--output",
        default=None,
        help="Output filename (default: sample_output.<ext> from the asset)",
    )
    parser.add_argument(
        "--prompt",
        default="a serene mountain landscape at dawn with misty valleys",
        help="Prompt for generation",
    )

    args = parser.parse_args()

    print(f"Generating image via {args.provider} with prompt: {args.prompt}")
    print()

    config = Config.from_env()
    config.validate()

    try:
        result = generate_image(
            GenerationRequest(prompt=args.prompt), provider=args.provider, config=config
        )
        asset = result.first
        output = args.output or f"sample_output.{asset.file_name.rsplit('.', 1)[-1]}"
        Path(output).write_bytes(_asset_bytes(asset.url, config.request_timeout))

        print("✓ Image generated successfully!")
        print(f"  - Saved to: {output}")
        print(f"  - Size: {asset.width}x{asset.height}")
        print(f"  - Model: {result.model_used}")
        print(f"  - Timings: {result.timings}")

    except (GenmediaError, requests.RequestException) as e:
        print(f"❌ Generation failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
