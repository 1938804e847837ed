"""Media handle helpers.

A media handle is whatever a provider hands back for an image, audio track or
video: an ``http(s)`` URL, an inline ``data:`` URI, or a local file path.
The renderer needs real files, so ``materialize_handle`` turns any of the
three into a path on disk.
"""

from __future__ import annotations

import base64
import binascii
import shutil
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit

import httpx

from .exceptions import MalformedOutputError
from .logging import get_logger

logger = get_logger(__name__, component="media")

PLACEHOLDER_HOSTS = ("placehold.co", "placehold.it", "via.placeholder.com", "placeholder.com")

_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/webp": "webp",
    "audio/wav": "wav",
    "audio/x-wav": "wav",
    "audio/mpeg": "mp3",
    "video/mp4": "mp4",
}


def is_data_uri(handle: Optional[str]) -> bool:
    return bool(handle) and handle.startswith("data:")


def is_remote_url(handle: Optional[str]) -> bool:
    return bool(handle) and handle.startswith(("http://", "https://"))


def encode_data_uri(data: bytes, mime_type: str) -> str:
    """Wrap raw bytes in a base64 ``data:`` URI."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def decode_data_uri(handle: str) -> tuple[bytes, str]:
    """Return ``(payload, mime_type)`` for a base64 data URI."""
    if not is_data_uri(handle) or "," not in handle:
        raise ValueError("Not a data URI")
    header, payload = handle.split(",", 1)
    mime_type = header[len("data:"):].split(";", 1)[0] or "application/octet-stream"
    if ";base64" not in header:
        raise ValueError("Only base64 data URIs are supported")
    try:
        return base64.b64decode(payload, validate=False), mime_type
    except (binascii.Error, ValueError) as exc:
        raise ValueError("Invalid base64 payload in data URI") from exc


def is_placeholder_image(handle: Optional[str]) -> bool:
    """True for missing handles and images served by stock placeholder hosts."""
    if not handle:
        return True
    if not is_remote_url(handle):
        return False
    host = (urlsplit(handle).hostname or "").lower()
    return any(host == known or host.endswith("." + known) for known in PLACEHOLDER_HOSTS)


def extension_for_mime(mime_type: Optional[str], default: str = "bin") -> str:
    return _EXTENSIONS.get((mime_type or "").lower(), default)


async def materialize_handle(
    handle: str,
    dest_dir: Path,
    stem: str,
    default_ext: str = "bin",
    client: Optional[httpx.AsyncClient] = None,
) -> Path:
    """Write the media behind ``handle`` to ``dest_dir/<stem>.<ext>``.

    Local paths are copied, data URIs decoded, and URLs downloaded with httpx.
    """
    dest_dir.mkdir(parents=True, exist_ok=True)

    if is_data_uri(handle):
        try:
            data, mime_type = decode_data_uri(handle)
        except ValueError as exc:
            raise MalformedOutputError(f"Unreadable media handle for {stem}: {exc}") from exc
        path = dest_dir / f"{stem}.{extension_for_mime(mime_type, default_ext)}"
        path.write_bytes(data)
        return path

    if is_remote_url(handle):
        owns_client = client is None
        http = client or httpx.AsyncClient(timeout=60.0, follow_redirects=True)
        try:
            response = await http.get(handle)
            response.raise_for_status()
        finally:
            if owns_client:
                await http.aclose()
        mime_type = response.headers.get("content-type", "").split(";", 1)[0]
        path = dest_dir / f"{stem}.{extension_for_mime(mime_type, default_ext)}"
        path.write_bytes(response.content)
        logger.debug(f"Downloaded {handle[:80]} -> {path.name}")
        return path

    source = Path(handle)
    if not source.exists():
        raise FileNotFoundError(f"Media handle does not exist: {handle}")
    path = dest_dir / f"{stem}{source.suffix or '.' + default_ext}"
    if source.resolve() != path.resolve():
        shutil.copyfile(source, path)
    return path
