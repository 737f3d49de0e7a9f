"""Pydantic schemas for the canonical, fully decoded recipe collection."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CanonicalModel(BaseModel):
    """Base for canonical models; serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Ingredient(CanonicalModel):
    """One ingredient line as found in the source."""

    name: Any = None
    amount: Any = None
    unit: Any = None


class IngredientGroup(CanonicalModel):
    """Ingredients under an optional heading; a None title means ungrouped."""

    title: Any = None
    ingredients: list[Ingredient] = Field(default_factory=list)


class Step(CanonicalModel):
    """One instruction step; either part may be missing."""

    id: str | None = None
    title: Any = None
    text: Any = None


class ImageRef(CanonicalModel):
    """Reference to a recipe image; ``id`` is the slugified URL."""

    id: str
    author: Any = None
    url: str


class Cookbook(CanonicalModel):
    """A named collection of recipe ids."""

    id: str | None = None
    name: Any
    recipe_ids: list[str] = Field(default_factory=list)

    @field_validator("recipe_ids", mode="before")
    @classmethod
    def default_recipe_ids(cls, v: Any) -> list[Any]:
        """Empty arrays decode to None; treat them as no members."""
        if v is None:
            return []
        if not isinstance(v, list):
            return v
        return [str(item) for item in v if item is not None]


class CanonicalRecipe(CanonicalModel):
    """
    Target-agnostic representation of one recipe after decoding.

    Only the id, title and image urls are checked. Every other value is kept
    exactly as decoded, whatever its type.
    """

    id: str
    title: str
    dishes_title: Any = None
    dishes: Any = None
    scaled_dishes: Any = None
    total_time: Any = None
    rating: Any = None
    source: Any = None
    nutrition: Any = None
    ingredient_groups: list[IngredientGroup] = Field(default_factory=list)
    steps: list[Step] = Field(default_factory=list)
    images: list[ImageRef] = Field(default_factory=list)
    tags: Any = None
    cookbook_names: list[Any] = Field(default_factory=list)
    created_at: Any = None

    @field_validator("tags", mode="before")
    @classmethod
    def drop_empty_tags(cls, v: Any) -> Any:
        """Blank categories decode to None inside the array."""
        if not isinstance(v, list):
            return v
        return [tag for tag in v if tag is not None]

    @field_validator("nutrition", mode="before")
    @classmethod
    def drop_empty_nutrition(cls, v: Any) -> Any:
        """Keep only nutrition entries that carry a value."""
        if not isinstance(v, dict):
            return v
        return {name: value for name, value in v.items() if value}

    @property
    def has_nutrition(self) -> bool:
        """Check if any nutrition value survived filtering."""
        return isinstance(self.nutrition, dict) and bool(self.nutrition)
