"""End-to-end conversion run: read exports, fetch images, write bundles."""

import json
import uuid
from pathlib import Path
from typing import Any

from cookbookconverter.config import Settings, get_settings
from cookbookconverter.export.bundle import BundleBuilder, IdFactory, bundle_filename, generate_uuid
from cookbookconverter.ingest.connectors import HttpImageConnector, ImageFetcher
from cookbookconverter.ingest.images import ImageCache, ImageDownloadResult, ImageResolver
from cookbookconverter.ingest.normalizer import RecipeNormalizer, load_export
from cookbookconverter.ingest.schemas import CanonicalRecipe
from cookbookconverter.logging_config import LoggingContext, get_logger
from cookbookconverter.normalize.units import UnitReconciler

logger = get_logger(__name__)

AGGREGATE_FILENAME = "recipes.json"


class ConversionResult:
    """Result of a conversion run."""

    def __init__(self) -> None:
        self.recipes_total: int = 0
        self.bundles_written: list[Path] = []
        self.images_downloaded: int = 0
        self.images_failed: int = 0
        self.unmapped_units: list[str] = []

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for reporting."""
        return {
            "recipes_total": self.recipes_total,
            "bundles_written": len(self.bundles_written),
            "images_downloaded": self.images_downloaded,
            "images_failed": self.images_failed,
            "unmapped_units": self.unmapped_units,
        }


def read_recipes(settings: Settings) -> dict[str, CanonicalRecipe]:
    """Load and decode both export documents; raises before anything is written."""
    recipe_records = load_export(settings.recipes_path)
    cookbook_records = load_export(settings.cookbooks_path)
    return RecipeNormalizer().normalize(recipe_records, cookbook_records)


def write_aggregate(recipes: dict[str, CanonicalRecipe], output_dir: Path) -> Path:
    """Write the decoded collection as one pretty-printed JSON listing."""
    path = output_dir / AGGREGATE_FILENAME
    listing = {
        recipe_id: recipe.model_dump(mode="json", by_alias=True)
        for recipe_id, recipe in recipes.items()
    }
    path.write_text(json.dumps(listing, indent=4, ensure_ascii=False), encoding="utf-8")
    logger.info(f"Wrote {len(listing)} recipes to {path}")
    return path


def write_bundles(
    recipes: dict[str, CanonicalRecipe],
    builder: BundleBuilder,
    output_dir: Path,
    suffix: str,
) -> list[Path]:
    """Write one bundle per recipe, numbered from 1 in collection order."""
    paths = []
    for index, recipe in enumerate(recipes.values(), start=1):
        with LoggingContext(recipe_id=recipe.id):
            bundle = builder.build(recipe)
            path = output_dir / bundle_filename(index, recipe, suffix)
            path.write_text(bundle.to_json(), encoding="utf-8")
            logger.debug(f"Wrote {path.name}")
        paths.append(path)
    return paths


async def run_conversion(
    settings: Settings | None = None,
    fetcher: ImageFetcher | None = None,
    id_factory: IdFactory = generate_uuid,
) -> ConversionResult:
    """
    Main entry point for a conversion run.

    Args:
        settings: Directories and options; defaults to the environment settings.
        fetcher: Image fetcher to use. An HTTP connector is created if None.
        id_factory: Generator for the opaque ids of bundle entities.

    Returns:
        ConversionResult summarizing the run.

    Raises:
        ConversionError: If the export is malformed. No output is written then.
    """
    settings = settings or get_settings()
    result = ConversionResult()

    with LoggingContext(run_id=uuid.uuid4().hex):
        recipes = read_recipes(settings)
        result.recipes_total = len(recipes)
        logger.info(f"Found {len(recipes)} recipes")

        settings.output_dir.mkdir(parents=True, exist_ok=True)
        write_aggregate(recipes, settings.output_dir)

        settings.images_dir.mkdir(parents=True, exist_ok=True)
        cache = ImageCache(settings.images_dir)

        if fetcher is None:
            async with HttpImageConnector(timeout=settings.image_timeout) as connector:
                downloads = await _download_images(recipes, connector, cache, settings)
        else:
            downloads = await _download_images(recipes, fetcher, cache, settings)
        result.images_downloaded = len(downloads.downloaded)
        result.images_failed = len(downloads.failed)

        units = UnitReconciler()
        builder = BundleBuilder(
            image_cache=cache,
            units=units,
            id_factory=id_factory,
            default_step_heading=settings.default_step_heading,
            sender_name=settings.sender_name,
        )
        result.bundles_written = write_bundles(
            recipes, builder, settings.output_dir, settings.bundle_suffix
        )
        logger.info(f"Wrote {len(result.bundles_written)} bundles to {settings.output_dir}")

        result.unmapped_units = units.unmapped_units
        if result.unmapped_units:
            logger.warning(f"Unknown units: {', '.join(result.unmapped_units)}")

    return result


async def _download_images(
    recipes: dict[str, CanonicalRecipe],
    fetcher: ImageFetcher,
    cache: ImageCache,
    settings: Settings,
) -> ImageDownloadResult:
    resolver = ImageResolver(
        fetcher=fetcher,
        cache=cache,
        placeholder_marker=settings.placeholder_image_marker,
        concurrency=settings.image_concurrency,
    )
    return await resolver.resolve(recipes.values())
