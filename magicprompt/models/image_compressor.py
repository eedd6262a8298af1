"""Image compression for vision payload size control."""

import base64
import io
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from PIL import Image

from magicprompt.schemas.message_models import MediaItem, MediaType
from magicprompt.utils.data_url import (
    get_data_url_mime,
    mime_for_format,
    strip_data_url_prefix,
)


logger = logging.getLogger(__name__)


# Longest side allowed after compression, in pixels
MAX_IMAGE_DIMENSION = 256

# Quality levels per target format. PNG is lossless, so its value is mapped
# onto the zlib compression level rather than a perceptual quality.
PNG_QUALITY = 30
WEBP_QUALITY = 60
JPEG_QUALITY = 75


class ImageFormat(str, Enum):
    """Target encodings supported by the compressor."""
    PNG = "PNG"
    WEBP = "WEBP"
    JPG = "JPG"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            normalized = value.upper()
            if normalized == "JPEG":
                return cls.JPG
            for member in cls:
                if member.value == normalized:
                    return member
        return None


@dataclass(frozen=True)
class CompressedMedia:
    """Result of compressing one media item."""
    data: str
    media_type: str
    compressed: bool


class ImageCompressor:
    """Resizes and re-encodes inbound images to a target format."""

    def __init__(
        self,
        max_dimension: int = MAX_IMAGE_DIMENSION,
        qualities: Optional[Dict[ImageFormat, int]] = None
    ):
        """Initialize ImageCompressor.

        Args:
            max_dimension: Maximum length of the longer image side
            qualities: Quality overrides per target format (1-100)
        """
        self.max_dimension = max_dimension
        self.qualities = {
            ImageFormat.PNG: PNG_QUALITY,
            ImageFormat.WEBP: WEBP_QUALITY,
            ImageFormat.JPG: JPEG_QUALITY,
        }
        if qualities:
            self.qualities.update({ImageFormat(k): v for k, v in qualities.items()})

    def compress(self, media: MediaItem, target_format: Union[ImageFormat, str]) -> str:
        """Compress a media item and return bare base64 in the target format.

        URLs, non-image media and anything that fails to decode are returned
        unchanged.
        """
        return self.compress_media(media, target_format).data

    def compress_media(
        self,
        media: MediaItem,
        target_format: Union[ImageFormat, str]
    ) -> CompressedMedia:
        """Compress a media item, reporting the MIME type of the returned data.

        Args:
            media: Media item to compress
            target_format: Output encoding

        Returns:
            CompressedMedia with the payload, its MIME type and whether it was
            re-encoded
        """
        target_format = ImageFormat(target_format)
        source_mime = get_data_url_mime(media.data) or media.media_type

        if media.type != MediaType.BASE64:
            return CompressedMedia(media.data, source_mime, False)

        if not (source_mime or "").lower().startswith("image/"):
            logger.debug(f"Skipping compression for non-image media: {source_mime}")
            return CompressedMedia(media.data, source_mime, False)

        try:
            image = self._decode(media.data)
            original_size = image.size
            image = self.resize(image)
            encoded = self.encode(image, target_format)
        except Exception as e:
            logger.warning(f"Image compression failed, sending original data: {e}")
            return CompressedMedia(media.data, source_mime, False)

        logger.debug(
            f"Compressed image {original_size} -> {image.size} as {target_format.value} "
            f"({len(media.data)} -> {len(encoded)} chars)"
        )
        return CompressedMedia(encoded, mime_for_format(target_format.value), True)

    def _decode(self, data: str) -> Image.Image:
        """Decode raw base64 or a data URL into a loaded PIL image."""
        payload = "".join(strip_data_url_prefix(data).split())
        raw = base64.b64decode(payload, validate=True)
        image = Image.open(io.BytesIO(raw))
        image.load()
        return image

    def resize(self, image: Image.Image) -> Image.Image:
        """Scale down so the longer side equals max_dimension; never upscale."""
        new_size = self.target_size(image.size)
        if new_size == image.size:
            return image
        return image.resize(new_size, Image.Resampling.BICUBIC)

    def target_size(self, size: Tuple[int, int]) -> Tuple[int, int]:
        """Compute the output size for an image of the given size."""
        width, height = size
        longest = max(width, height)
        if longest <= self.max_dimension:
            return size

        if width >= height:
            new_width = self.max_dimension
            new_height = max(1, round(height * self.max_dimension / width))
        else:
            new_height = self.max_dimension
            new_width = max(1, round(width * self.max_dimension / height))
        return new_width, new_height

    def encode(self, image: Image.Image, target_format: ImageFormat) -> str:
        """Encode an image as bare base64 in the target format."""
        quality = self.qualities[target_format]
        buffer = io.BytesIO()

        if target_format == ImageFormat.JPG:
            if image.mode != "RGB":
                image = image.convert("RGB")
            image.save(buffer, format="JPEG", quality=quality, optimize=True)
        elif target_format == ImageFormat.WEBP:
            image = self._normalize_mode(image)
            image.save(buffer, format="WEBP", quality=quality)
        else:
            image = self._normalize_mode(image)
            image.save(
                buffer,
                format="PNG",
                optimize=True,
                compress_level=self._png_compress_level(quality)
            )

        return base64.b64encode(buffer.getvalue()).decode("ascii")

    @staticmethod
    def _normalize_mode(image: Image.Image) -> Image.Image:
        """Convert palette and exotic modes to RGB or RGBA."""
        if image.mode in ("RGB", "RGBA", "L", "LA"):
            return image
        has_alpha = image.mode in ("P", "PA") and "transparency" in image.info
        return image.convert("RGBA" if has_alpha or "A" in image.mode else "RGB")

    @staticmethod
    def _png_compress_level(quality: int) -> int:
        """Map a 1-100 quality onto zlib levels 0-9 (lower quality packs harder)."""
        quality = min(max(quality, 0), 100)
        return round((100 - quality) * 9 / 100)

    def get_image_info(self, data: str) -> Dict[str, Any]:
        """Get format and size information for a base64 image.

        Raises:
            ValueError: If the data cannot be decoded as an image
        """
        try:
            image = self._decode(data)
        except Exception as e:
            raise ValueError(f"Cannot decode image: {e}") from e
        return {
            "format": image.format,
            "mode": image.mode,
            "width": image.width,
            "height": image.height,
            "has_transparency": image.mode in ("RGBA", "LA") or "transparency" in image.info,
        }
