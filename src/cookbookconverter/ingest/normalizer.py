"""Turn raw export records into canonical recipes."""

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from slugify import slugify

from cookbookconverter.ingest.exceptions import (
    ConversionError,
    DecodeError,
    MissingRequiredFieldError,
)
from cookbookconverter.ingest.schemas import (
    CanonicalRecipe,
    Cookbook,
    ImageRef,
    Ingredient,
    IngredientGroup,
    Step,
)
from cookbookconverter.ingest.tagged_values import decode_field, document_fields
from cookbookconverter.logging_config import get_logger

logger = get_logger(__name__)


def load_export(path: Path) -> list[dict[str, Any]]:
    """
    Read one export document.

    Args:
        path: JSON file holding a list of ``{"document": {"fields": ...}}`` records.

    Returns:
        The raw records, still tagged.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConversionError(f"Export file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise DecodeError(f"{path} is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise DecodeError(f"{path} does not contain a list of records")

    logger.debug(f"Loaded {len(data)} records from {path}")
    return data


def image_id_for_url(url: str) -> str:
    """Stable cache key and file name for an image URL."""
    return slugify(url)


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


class RecipeNormalizer:
    """Decodes recipe and cookbook records and links them together."""

    def parse_recipe(self, record: Mapping[str, Any]) -> CanonicalRecipe:
        """
        Decode a single recipe record.

        Raises:
            MissingRequiredFieldError: If the id or title is missing.
            DecodeError: If any envelope is malformed.
        """
        fields = document_fields(record)

        recipe_id = decode_field(fields, "id")
        if recipe_id is None:
            raise MissingRequiredFieldError("Recipe has no id.", field="id")
        recipe_id = str(recipe_id)

        title = decode_field(fields, "title")
        if title is None:
            raise MissingRequiredFieldError(
                f"Recipe {recipe_id} has empty title.", record_id=recipe_id, field="title"
            )

        return CanonicalRecipe(
            id=recipe_id,
            title=title,
            dishes_title=decode_field(fields, "dishesTitle"),
            dishes=decode_field(fields, "dishes"),
            scaled_dishes=decode_field(fields, "scaledDishes"),
            total_time=decode_field(fields, "totalTime"),
            rating=decode_field(fields, "rating"),
            source=decode_field(fields, "source"),
            nutrition=decode_field(fields, "nutrition"),
            ingredient_groups=self._parse_ingredient_groups(decode_field(fields, "ingredientLists")),
            steps=self._parse_steps(decode_field(fields, "instructions")),
            images=self._parse_images(recipe_id, decode_field(fields, "images")),
            tags=decode_field(fields, "categories"),
            created_at=decode_field(fields, "createdAt"),
        )

    def _parse_ingredient_groups(self, groups: list[Any] | None) -> list[IngredientGroup]:
        result = []
        for group in groups or []:
            group = _as_dict(group)
            ingredients = [
                Ingredient(
                    name=_as_dict(item.get("product")).get("name"),
                    amount=item.get("amount"),
                    unit=_as_dict(item.get("unit")).get("name"),
                )
                for item in map(_as_dict, group.get("ingredients") or [])
            ]
            result.append(IngredientGroup(title=group.get("title"), ingredients=ingredients))
        return result

    def _parse_steps(self, instructions: list[Any] | None) -> list[Step]:
        steps = []
        for instruction in map(_as_dict, instructions or []):
            step_id = instruction.get("id")
            steps.append(
                Step(
                    id=str(step_id) if step_id is not None else None,
                    title=instruction.get("title"),
                    text=instruction.get("text"),
                )
            )
        return steps

    def _parse_images(self, recipe_id: str, images: list[Any] | None) -> list[ImageRef]:
        refs = []
        for image in map(_as_dict, images or []):
            url = image.get("url")
            if url is None:
                raise MissingRequiredFieldError(
                    f"Recipe {recipe_id} has an image without url.",
                    record_id=recipe_id,
                    field="images.url",
                )
            if not isinstance(url, str):
                raise DecodeError(f"Recipe {recipe_id} has an image url that is not a string.")
            refs.append(ImageRef(id=image_id_for_url(url), author=image.get("author"), url=url))
        return refs

    def parse_cookbook(self, record: Mapping[str, Any]) -> Cookbook:
        """Decode a single cookbook record."""
        fields = document_fields(record)

        cookbook_id = decode_field(fields, "id")
        name = decode_field(fields, "name")
        if name is None:
            raise MissingRequiredFieldError(
                f"Cookbook {cookbook_id} has no name.",
                record_id=str(cookbook_id) if cookbook_id is not None else None,
                field="name",
            )

        return Cookbook(
            id=str(cookbook_id) if cookbook_id is not None else None,
            name=name,
            recipe_ids=decode_field(fields, "recipeIds"),
        )

    def attach_cookbooks(
        self, recipes: dict[str, CanonicalRecipe], cookbooks: Iterable[Cookbook]
    ) -> None:
        """Append each cookbook's name to the recipes it lists, in cookbook order."""
        for cookbook in cookbooks:
            for recipe_id in cookbook.recipe_ids:
                recipe = recipes.get(recipe_id)
                # Exports may still reference deleted recipes
                if recipe is None:
                    logger.debug(f"Cookbook '{cookbook.name}' references unknown recipe {recipe_id}")
                    continue
                recipe.cookbook_names.append(cookbook.name)

    def normalize(
        self,
        recipe_records: Iterable[Mapping[str, Any]],
        cookbook_records: Iterable[Mapping[str, Any]],
    ) -> dict[str, CanonicalRecipe]:
        """
        Decode all records into canonical recipes keyed by recipe id.

        Args:
            recipe_records: Raw recipe export records.
            cookbook_records: Raw cookbook export records.

        Returns:
            Mapping of recipe id to canonical recipe, in export order.
        """
        recipes: dict[str, CanonicalRecipe] = {}
        try:
            for record in recipe_records:
                recipe = self.parse_recipe(record)
                if recipe.id in recipes:
                    logger.warning(f"Duplicate recipe id {recipe.id}, keeping the later record")
                recipes[recipe.id] = recipe

            cookbooks = [self.parse_cookbook(record) for record in cookbook_records]
        except ValidationError as e:
            raise DecodeError(f"Unexpected value types in export: {e}") from e

        self.attach_cookbooks(recipes, cookbooks)

        logger.info(f"Normalized {len(recipes)} recipes and {len(cookbooks)} cookbooks")
        return recipes
