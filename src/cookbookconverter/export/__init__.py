"""Writing recipes in the target application's bundle format."""

from cookbookconverter.export.bundle import (
    BundleBuilder,
    bundle_filename,
    generate_uuid,
    render_nutrition,
    source_site_name,
)
from cookbookconverter.export.schemas import BundleRecord, IngredientEntry, StepEntry

__all__ = [
    "BundleBuilder",
    "BundleRecord",
    "IngredientEntry",
    "StepEntry",
    "bundle_filename",
    "generate_uuid",
    "render_nutrition",
    "source_site_name",
]
