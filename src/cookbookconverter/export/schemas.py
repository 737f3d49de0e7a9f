"""Pydantic schemas for the target application's recipe bundle."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_serializer
from pydantic.alias_generators import to_camel

from cookbookconverter.normalize.units import QuantityType


class BundleModel(BaseModel):
    """Base for bundle models; serialized with the target's camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )


class IngredientEntity(BundleModel):
    uuid: str
    name: Any


class Quantity(BundleModel):
    """Unit kind and amount; a SECTION quantity has no amount."""

    quantity_type: QuantityType
    amount: Any = None

    @model_serializer(mode="wrap")
    def omit_section_amount(self, handler: Any) -> dict[str, Any]:
        data = handler(self)
        if self.quantity_type == QuantityType.SECTION:
            data.pop("amount", None)
        return data


class IngredientEntry(BundleModel):
    uuid: str
    order: int
    ingredient: IngredientEntity
    quantity: Quantity

    @property
    def is_section(self) -> bool:
        return self.quantity.quantity_type == QuantityType.SECTION


class StepEntry(BundleModel):
    uuid: str
    order: int
    is_section: bool
    step: Any


class BundleRecord(BundleModel):
    """One recipe in the target format."""

    uuid: str
    name: str
    serves: Any = None
    default_scale: Any = None
    duration: Any = None
    cooking_duration: Any = None
    web_link: Any = None
    nutritional_info: str | None = Field(default=None, alias="neutritionalInfo")
    sender_name: str | None = None
    source_name: str | None = None
    ingredients: list[IngredientEntry] = Field(default_factory=list)
    steps: list[StepEntry] = Field(default_factory=list)
    is_public_recipe: bool = False
    tags: list[str] = Field(default_factory=list)
    folder_ids: list[str] = Field(default_factory=list, alias="folderIDs")
    images: list[str] = Field(default_factory=list)

    def to_json(self) -> str:
        """Serialize with the target's key names, keeping non-ASCII text as is."""
        return self.model_dump_json(by_alias=True)
