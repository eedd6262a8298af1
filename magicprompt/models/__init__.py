"""Models layer package for request translation, image compression and response handling."""

from .image_compressor import (
    ImageCompressor,
    ImageFormat,
    CompressedMedia,
    MAX_IMAGE_DIMENSION,
    PNG_QUALITY,
    WEBP_QUALITY,
    JPEG_QUALITY,
)
from .schema_translator import (
    SchemaTranslator,
    BACKEND_IMAGE_FORMATS,
    NO_SEED,
)
from .response_normalizer import (
    ResponseNormalizer,
    content_to_text,
)
from .error_classifier import (
    ErrorCategory,
    classify_error,
    describe_error,
    detect_error_category,
    extract_error_message,
)

__all__ = [
    # Image compression
    "ImageCompressor",
    "ImageFormat",
    "CompressedMedia",
    "MAX_IMAGE_DIMENSION",
    "PNG_QUALITY",
    "WEBP_QUALITY",
    "JPEG_QUALITY",
    # Request translation
    "SchemaTranslator",
    "BACKEND_IMAGE_FORMATS",
    "NO_SEED",
    # Response handling
    "ResponseNormalizer",
    "content_to_text",
    # Error classification
    "ErrorCategory",
    "classify_error",
    "describe_error",
    "detect_error_category",
    "extract_error_message",
]
