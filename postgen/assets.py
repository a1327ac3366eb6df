"""
AssetLoader - Fetches and decodes images for compositing.

Handles:
1. Template overlays by name (template directory), path, file:// or http(s)://
2. User backgrounds as raw bytes or data: URIs
3. Caching of template overlays for the lifetime of an AssetCache
4. Soft failure: any fetch/decode error yields UNAVAILABLE instead of raising

User uploads are never cached; they are decoded fresh on every render.
"""

import base64
import binascii
import io
import logging
from pathlib import Path
from typing import Dict, Iterable, Optional, Union
from urllib.parse import unquote, urlparse

import httpx
from PIL import Image, ImageOps

from .config import Settings, get_settings

logger = logging.getLogger(__name__)

AssetSource = Union[bytes, str, Path]


class _Unavailable:
    """Sentinel for an image that could not be loaded."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNAVAILABLE"


UNAVAILABLE = _Unavailable()


class AssetCache:
    """
    Reference -> decoded image mapping.

    Append-only and never evicted: it only ever holds the small fixed set of
    template overlays. Callers own the instance; tests create one per case.
    """

    def __init__(self):
        self._images: Dict[str, Image.Image] = {}

    def get(self, reference: str) -> Optional[Image.Image]:
        return self._images.get(reference)

    def put(self, reference: str, image: Image.Image) -> None:
        self._images.setdefault(reference, image)

    def __contains__(self, reference: str) -> bool:
        return reference in self._images

    def __len__(self) -> int:
        return len(self._images)


def is_ephemeral(source: AssetSource) -> bool:
    """True for user-supplied sources that must not be cached."""
    if isinstance(source, (bytes, bytearray)):
        return True
    return str(source).startswith("data:")


class AssetLoader:
    """
    Loads template overlays and user backgrounds as RGBA Pillow images.

    Failures are logged and reported as UNAVAILABLE so a render can carry on
    with a placeholder.
    """

    def __init__(
        self,
        cache: Optional[AssetCache] = None,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize loader.

        Args:
            cache: Cache for template overlays. A private one is created if None.
            settings: Runtime settings (template directory, timeouts)
            client: Optional shared HTTP client; one is opened per fetch otherwise
        """
        self.cache = cache if cache is not None else AssetCache()
        self.settings = settings or get_settings()
        self._client = client

    async def load(self, source: AssetSource) -> Union[Image.Image, _Unavailable]:
        """
        Load an image, using the cache for non-ephemeral references.

        Args:
            source: Template name, path, URL, data: URI or raw bytes

        Returns:
            Decoded RGBA image, or UNAVAILABLE on any fetch/decode failure
        """
        if is_ephemeral(source):
            return await self._fetch_and_decode(source)

        reference = str(source)
        cached = self.cache.get(reference)
        if cached is not None:
            return cached

        image = await self._fetch_and_decode(reference)
        if image is not UNAVAILABLE:
            self.cache.put(reference, image)
        return image

    async def load_user_image(self, source: AssetSource) -> Union[Image.Image, _Unavailable]:
        """
        Decode a user background, bypassing the cache.

        Applies EXIF orientation and shrinks images wider than
        ``max_upload_width`` so oversized phone photos stay cheap to composite.
        """
        image = await self._fetch_and_decode(source, orient=True)
        if image is UNAVAILABLE:
            return image

        max_width = self.settings.max_upload_width
        if image.width > max_width:
            height = round(image.height * max_width / image.width)
            logger.debug(f"Downscaling background {image.width}x{image.height} -> {max_width}x{height}")
            image = image.resize((max_width, max(1, height)), Image.Resampling.LANCZOS)
        return image

    async def preload(self, references: Iterable[str]) -> int:
        """Warm the cache. Returns how many references loaded successfully."""
        loaded = 0
        for reference in references:
            if await self.load(reference) is not UNAVAILABLE:
                loaded += 1
        logger.info(f"Preloaded {loaded} template overlays")
        return loaded

    async def _fetch_and_decode(self, source: AssetSource, orient: bool = False) -> Union[Image.Image, _Unavailable]:
        label = _describe(source)
        try:
            data = await self._read_bytes(source)
            return _decode(data, orient=orient)
        except (httpx.HTTPError, OSError, ValueError, Image.DecompressionBombError) as e:
            logger.warning(f"Asset unavailable ({label}): {e}")
            return UNAVAILABLE

    async def _read_bytes(self, source: AssetSource) -> bytes:
        if isinstance(source, (bytes, bytearray)):
            return bytes(source)

        reference = str(source)
        if reference.startswith("data:"):
            return _decode_data_uri(reference)

        if reference.startswith(("http://", "https://")):
            return await self._fetch_url(reference)

        if reference.startswith("file://"):
            return Path(unquote(urlparse(reference).path)).read_bytes()

        return self._resolve_path(reference).read_bytes()

    async def _fetch_url(self, url: str) -> bytes:
        if self._client is not None:
            response = await self._client.get(url)
            response.raise_for_status()
            return response.content

        async with httpx.AsyncClient(timeout=self.settings.http_timeout, follow_redirects=True) as client:
            response = await client.get(url)
            response.raise_for_status()
            return response.content

    def _resolve_path(self, reference: str) -> Path:
        path = Path(reference)
        if path.is_absolute():
            return path
        return Path(self.settings.template_dir) / path


def _decode_data_uri(uri: str) -> bytes:
    header, sep, payload = uri.partition(",")
    if not sep:
        raise ValueError("Malformed data URI")
    if header.endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=True)
        except binascii.Error as e:
            raise ValueError(f"Invalid base64 payload: {e}") from e
    return unquote(payload).encode("latin-1")


def _decode(data: bytes, orient: bool = False) -> Image.Image:
    image = Image.open(io.BytesIO(data))
    image.load()
    if orient:
        image = ImageOps.exif_transpose(image)
    return image.convert("RGBA")


def _describe(source: AssetSource) -> str:
    if isinstance(source, (bytes, bytearray)):
        return f"{len(source)} bytes"
    reference = str(source)
    if reference.startswith("data:"):
        return reference[:30] + "..."
    return reference
