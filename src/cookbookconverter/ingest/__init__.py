"""Reading and decoding of the source export."""

from cookbookconverter.ingest.exceptions import (
    ConversionError,
    DecodeError,
    MissingRequiredFieldError,
)
from cookbookconverter.ingest.images import ImageCache, ImageDownloadResult, ImageResolver
from cookbookconverter.ingest.normalizer import RecipeNormalizer, load_export
from cookbookconverter.ingest.tagged_values import decode, decode_field

__all__ = [
    "ConversionError",
    "DecodeError",
    "ImageCache",
    "ImageDownloadResult",
    "ImageResolver",
    "MissingRequiredFieldError",
    "RecipeNormalizer",
    "decode",
    "decode_field",
    "load_export",
]
