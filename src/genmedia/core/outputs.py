"""
Decoding of heterogeneous vendor outputs.

Vendors return a single URL, a list of URLs, inline base64 image data, or a
nested object with per-asset metadata. decode_output() sniffs the shape once
and returns a tagged VendorOutput; to_assets() turns any variant into
GeneratedAsset records without looking at the raw payload again.
"""

import base64
import io
import mimetypes
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from PIL import Image

from genmedia.core.models import GeneratedAsset
from genmedia.logging_config import get_logger
from genmedia.utils.exceptions import UpstreamError

logger = get_logger(__name__)


class OutputKind(str, Enum):
    URL = "url"
    URL_LIST = "url_list"
    INLINE = "inline"
    ASSET_LIST = "asset_list"
    EMPTY = "empty"


@dataclass(frozen=True)
class InlineImage:
    """Base64 image data with its MIME type."""

    data: str
    mime_type: str = "image/png"

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


@dataclass(frozen=True)
class VendorOutput:
    """Tagged vendor output. Only the field matching ``kind`` is populated."""

    kind: OutputKind
    urls: tuple[str, ...] = ()
    inline: tuple[InlineImage, ...] = ()
    assets: tuple[dict[str, Any], ...] = ()

    @classmethod
    def empty(cls) -> "VendorOutput":
        return cls(OutputKind.EMPTY)


def _parse_data_url(value: str) -> InlineImage:
    """Split 'data:image/png;base64,AAAA' into an InlineImage."""
    header, _, data = value.partition(",")
    mime_type = header[len("data:") :].split(";", 1)[0] or "image/png"
    return InlineImage(data=data, mime_type=mime_type)


def _decode_prediction(index: int, prediction: Any, provider: str) -> InlineImage:
    if not isinstance(prediction, dict) or not prediction.get("bytesBase64Encoded"):
        raise UpstreamError(
            f"No image data found in prediction {index}",
            response=str(prediction)[:500],
            provider=provider,
        )
    return InlineImage(
        data=prediction["bytesBase64Encoded"],
        mime_type=prediction.get("mimeType") or "image/png",
    )


def decode_output(raw: Any, provider: str = "") -> VendorOutput:
    """
    Classify a raw vendor output.

    Raises:
        UpstreamError: If the shape is not one any adapter understands
    """
    if raw is None or raw == "" or raw == []:
        return VendorOutput.empty()

    if isinstance(raw, str):
        if raw.startswith("data:"):
            return VendorOutput(OutputKind.INLINE, inline=(_parse_data_url(raw),))
        return VendorOutput(OutputKind.URL, urls=(raw,))

    if isinstance(raw, list):
        if all(isinstance(item, str) for item in raw):
            urls = tuple(item for item in raw if item)
            if any(url.startswith("data:") for url in urls):
                return VendorOutput(
                    OutputKind.INLINE, inline=tuple(_parse_data_url(u) for u in urls)
                )
            return VendorOutput(OutputKind.URL_LIST, urls=urls)
        if all(isinstance(item, dict) for item in raw):
            return VendorOutput(OutputKind.ASSET_LIST, assets=tuple(raw))

    if isinstance(raw, dict):
        if isinstance(raw.get("predictions"), list):
            inline = tuple(
                _decode_prediction(i, p, provider) for i, p in enumerate(raw["predictions"])
            )
            return VendorOutput(OutputKind.INLINE, inline=inline)
        if raw.get("bytesBase64Encoded"):
            return VendorOutput(OutputKind.INLINE, inline=(_decode_prediction(0, raw, provider),))
        if isinstance(raw.get("images"), list):
            return decode_output(raw["images"], provider)
        for key in ("image", "video"):
            nested = raw.get(key)
            if isinstance(nested, dict):
                return VendorOutput(OutputKind.ASSET_LIST, assets=(nested,))
            if isinstance(nested, str):
                return decode_output(nested, provider)
        if "output" in raw:
            return decode_output(raw["output"], provider)
        if isinstance(raw.get("url"), str):
            return VendorOutput(OutputKind.ASSET_LIST, assets=(raw,))

    raise UpstreamError(
        f"Unexpected output shape from provider: {type(raw).__name__}",
        response=str(raw)[:500],
        provider=provider,
    )


def _content_type_for(url: str, default: str) -> str:
    if url.startswith("data:"):
        return _parse_data_url(url).mime_type
    guessed, _ = mimetypes.guess_type(url.split("?", 1)[0])
    return guessed or default


def _extension_for(content_type: str) -> str:
    subtype = content_type.split("/", 1)[-1].split(";", 1)[0].strip()
    return {"jpeg": "jpg", "quicktime": "mov"}.get(subtype, subtype or "bin")


def _inline_size(image: InlineImage) -> tuple[int, int] | None:
    """Read pixel dimensions from inline data; None if it cannot be decoded."""
    try:
        with Image.open(io.BytesIO(base64.b64decode(image.data))) as pil_image:
            return pil_image.size
    except (ValueError, OSError):
        logger.debug("Could not read dimensions of inline %s data", image.mime_type)
        return None


def to_assets(
    output: VendorOutput,
    *,
    default_size: tuple[int, int],
    default_content_type: str,
    file_prefix: str,
) -> list[GeneratedAsset]:
    """
    Normalize a decoded vendor output into GeneratedAsset records.

    Args:
        output: Result of decode_output()
        default_size: (width, height) used when the vendor does not report one
        default_content_type: MIME type used when it cannot be inferred
        file_prefix: File name stem, suffixed with the asset index

    Returns:
        Possibly empty list; callers treat an empty list as an error.
    """
    width, height = default_size
    assets: list[GeneratedAsset] = []

    if output.kind in (OutputKind.URL, OutputKind.URL_LIST):
        for index, url in enumerate(output.urls):
            content_type = _content_type_for(url, default_content_type)
            assets.append(
                GeneratedAsset(
                    url=url,
                    width=width,
                    height=height,
                    content_type=content_type,
                    file_name=f"{file_prefix}-{index}.{_extension_for(content_type)}",
                )
            )
    elif output.kind is OutputKind.INLINE:
        for index, image in enumerate(output.inline):
            size = _inline_size(image) or default_size
            assets.append(
                GeneratedAsset(
                    url=image.data_url,
                    width=size[0],
                    height=size[1],
                    content_type=image.mime_type,
                    file_name=f"{file_prefix}-{index}.{_extension_for(image.mime_type)}",
                )
            )
    elif output.kind is OutputKind.ASSET_LIST:
        for index, item in enumerate(output.assets):
            url = item.get("url")
            if not isinstance(url, str) or not url:
                continue
            content_type = item.get("content_type") or _content_type_for(
                url, default_content_type
            )
            assets.append(
                GeneratedAsset(
                    url=url,
                    width=int(item.get("width") or width),
                    height=int(item.get("height") or height),
                    content_type=content_type,
                    file_name=item.get("file_name")
                    or f"{file_prefix}-{index}.{_extension_for(content_type)}",
                )
            )
    return assets


def require_assets(assets: Sequence[GeneratedAsset], provider: str) -> tuple[GeneratedAsset, ...]:
    """
    Return assets as a tuple, raising if the vendor produced nothing.

    Raises:
        UpstreamError: If assets is empty
    """
    if not assets:
        raise UpstreamError("no assets produced", provider=provider)
    return tuple(assets)
