"""Conversion of canonical recipes into target-format bundles."""

import uuid
from collections.abc import Callable
from urllib.parse import urlparse

from slugify import slugify

from cookbookconverter.export.schemas import (
    BundleRecord,
    IngredientEntity,
    IngredientEntry,
    Quantity,
    StepEntry,
)
from cookbookconverter.ingest.images import ImageCache
from cookbookconverter.ingest.schemas import CanonicalRecipe, IngredientGroup, Step
from cookbookconverter.logging_config import get_logger
from cookbookconverter.normalize.units import QuantityType, UnitReconciler

logger = get_logger(__name__)

IdFactory = Callable[[], str]

DEFAULT_STEP_HEADING = "Zubereitung"
DEFAULT_SENDER_NAME = "Körbchen"
DEFAULT_BUNDLE_SUFFIX = ".crumb"

# (nutrition key, line template) in output order
NUTRITION_LINES: list[tuple[str, str]] = [
    ("carbohydrate", "Kohlenhydrate: {}g"),
    ("calories", "Kalorien: {} kcal"),
    ("protein", "Protein: {}g"),
    ("fat", "Fett: {}g"),
]
SERVING_SIZE_LINE = "Serviergröße: {}"


def generate_uuid() -> str:
    """Upper-case random UUID, the form the target application writes."""
    return str(uuid.uuid4()).upper()


def _format_value(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def render_nutrition(recipe: CanonicalRecipe) -> str | None:
    """
    Render the nutrition summary shown in the target application.

    Returns:
        Lines joined by ",\\n", ending with the serving size, or None when
        the recipe carries no nutrition values at all.
    """
    if not recipe.has_nutrition:
        return None

    nutrition = recipe.nutrition
    lines = [
        template.format(_format_value(nutrition[key]))
        for key, template in NUTRITION_LINES
        if key in nutrition
    ]
    lines.append(SERVING_SIZE_LINE.format(_format_value(recipe.dishes)))
    return ",\n".join(lines)


def source_site_name(source: object) -> str | None:
    """Host of the source URL without ``www.``, first letter capitalized."""
    if not isinstance(source, str) or not source:
        return None

    # netloc keeps the original case of the host
    host = urlparse(source).netloc.rpartition("@")[2].partition(":")[0]
    if not host:
        return None

    host = host.removeprefix("www.")
    return host[:1].upper() + host[1:]


def bundle_filename(index: int, recipe: CanonicalRecipe, suffix: str = DEFAULT_BUNDLE_SUFFIX) -> str:
    """File name of the n-th (1-based) bundle."""
    return f"{index}-{slugify(recipe.title)}{suffix}"


class BundleBuilder:
    """
    Builds one BundleRecord per canonical recipe.

    Images are read from the cache; unit tokens go through the given
    reconciler, which keeps track of the ones it could not map.
    """

    def __init__(
        self,
        image_cache: ImageCache,
        units: UnitReconciler | None = None,
        id_factory: IdFactory = generate_uuid,
        default_step_heading: str = DEFAULT_STEP_HEADING,
        sender_name: str | None = DEFAULT_SENDER_NAME,
    ):
        self.image_cache = image_cache
        self.units = units or UnitReconciler()
        self.id_factory = id_factory
        self.default_step_heading = default_step_heading
        self.sender_name = sender_name

    def build(self, recipe: CanonicalRecipe) -> BundleRecord:
        """Convert one recipe into the target structure."""
        return BundleRecord(
            uuid=self.id_factory(),
            name=recipe.title,
            serves=recipe.dishes,
            default_scale=recipe.scaled_dishes,
            duration=None,
            cooking_duration=recipe.total_time,
            web_link=recipe.source,
            nutritional_info=render_nutrition(recipe),
            sender_name=self.sender_name,
            source_name=source_site_name(recipe.source),
            ingredients=self.build_ingredients(recipe.ingredient_groups),
            steps=self.build_steps(recipe.steps),
            is_public_recipe=False,
            tags=[],
            folder_ids=[],
            images=self.embed_images(recipe),
        )

    def _section(self, order: int, name: str) -> IngredientEntry:
        return IngredientEntry(
            uuid=self.id_factory(),
            order=order,
            ingredient=IngredientEntity(uuid=self.id_factory(), name=name),
            quantity=Quantity(quantity_type=QuantityType.SECTION),
        )

    def build_ingredients(self, groups: list[IngredientGroup]) -> list[IngredientEntry]:
        """
        Flatten ingredient groups into ordered entries.

        Group titles only become sections when there is more than one group;
        a lone group's title just repeats the recipe.
        """
        entries: list[IngredientEntry] = []
        with_sections = len(groups) > 1

        for group in groups:
            if with_sections and group.title is not None:
                entries.append(self._section(len(entries), group.title))

            for ingredient in group.ingredients:
                resolution = self.units.resolve(ingredient.unit)
                entries.append(
                    IngredientEntry(
                        uuid=self.id_factory(),
                        order=len(entries),
                        ingredient=IngredientEntity(
                            uuid=self.id_factory(),
                            name=resolution.display_name(ingredient.name),
                        ),
                        quantity=Quantity(
                            quantity_type=resolution.quantity_type,
                            amount=ingredient.amount,
                        ),
                    )
                )

        return entries

    def build_steps(self, steps: list[Step]) -> list[StepEntry]:
        """Flatten steps into ordered section and body entries."""
        entries: list[StepEntry] = []

        for index, step in enumerate(steps):
            if step.title is not None and not (
                index == 0 and step.title == self.default_step_heading
            ):
                entries.append(
                    StepEntry(
                        uuid=self.id_factory(), order=len(entries), is_section=True, step=step.title
                    )
                )

            if step.text is not None:
                entries.append(
                    StepEntry(
                        uuid=self.id_factory(), order=len(entries), is_section=False, step=step.text
                    )
                )

        return entries

    def embed_images(self, recipe: CanonicalRecipe) -> list[str]:
        """Base64 payloads of the recipe's cached images, in recipe order."""
        images = []
        for image in recipe.images:
            if not self.image_cache.exists(image.id):
                logger.debug(f"Image {image.id} not cached, leaving it out")
                continue
            images.append(self.image_cache.read(image.id))
        return images
