"""Mapping of source unit tokens onto the target quantity types."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from cookbookconverter.logging_config import get_logger

logger = get_logger(__name__)


class QuantityType(str, Enum):
    """Quantity kinds understood by the target application."""

    GRAMS = "GRAMS"
    KGS = "KGS"
    MILLS = "MILLS"
    LITRES = "LITRES"
    CENTILITER = "CENTILITER"
    DECILITER = "DECILITER"
    TABLESPOON = "TABLESPOON"
    TEASPOON = "TEASPOON"
    PINCH = "PINCH"
    BUNCH = "BUNCH"
    CAN = "CAN"
    CUP = "CUP"
    PACKET = "PACKET"
    BOTTLE = "BOTTLE"
    ITEM = "ITEM"
    SECTION = "SECTION"


# =============================================================================
# Unit Mapping Table
# =============================================================================

# Source tokens are matched exactly, including case and punctuation
UNIT_MAPPING: dict[str, QuantityType] = {
    "g": QuantityType.GRAMS,
    "kg": QuantityType.KGS,
    "ml": QuantityType.MILLS,
    "l": QuantityType.LITRES,
    "cl": QuantityType.CENTILITER,
    "dl": QuantityType.DECILITER,
    "EL": QuantityType.TABLESPOON,
    "TL": QuantityType.TEASPOON,
    "Prise(n)": QuantityType.PINCH,
    "Bund": QuantityType.BUNCH,
    "Dose(n)": QuantityType.CAN,
    "Becher": QuantityType.CUP,
    "Pck.": QuantityType.PACKET,
    "Pkt.": QuantityType.PACKET,
    "Flasche(n)": QuantityType.BOTTLE,
    "Stück(e)": QuantityType.ITEM,
    "St": QuantityType.ITEM,
}


@dataclass(frozen=True)
class UnitResolution:
    """Result of resolving one unit token."""

    quantity_type: QuantityType
    name_prefix: str | None = None  # unknown token to keep in the display name

    def display_name(self, name: Any) -> str:
        """Ingredient name with the unknown unit, if any, in front of it."""
        parts = [self.name_prefix, name]
        return " ".join(str(part) for part in parts if part).strip()


@dataclass
class UnitReconciler:
    """
    Resolves unit tokens and remembers the ones without a mapping.

    One reconciler is created per run by the caller. Tokens are recorded in
    first-seen order and only once each.
    """

    mapping: dict[str, QuantityType] = field(default_factory=lambda: dict(UNIT_MAPPING))
    _unmapped: dict[str, None] = field(default_factory=dict, init=False, repr=False)

    def resolve(self, token: Any) -> UnitResolution:
        """
        Resolve a source unit token to a target quantity type.

        A missing token means a plain count. An unknown token also falls back
        to ITEM but is returned as a name prefix so it stays visible.
        """
        if token is None:
            return UnitResolution(QuantityType.ITEM)
        if not isinstance(token, str):
            token = str(token)

        quantity_type = self.mapping.get(token)
        if quantity_type is not None:
            return UnitResolution(quantity_type)

        if token not in self._unmapped:
            logger.debug(f"No mapping for unit '{token}', falling back to ITEM")
            self._unmapped[token] = None
        return UnitResolution(QuantityType.ITEM, name_prefix=token)

    @property
    def unmapped_units(self) -> list[str]:
        """Unknown tokens seen so far, in first-seen order."""
        return list(self._unmapped)

    def merge(self, other: "UnitReconciler") -> "UnitReconciler":
        """Fold the unmapped tokens of another reconciler into this one."""
        for token in other.unmapped_units:
            self._unmapped.setdefault(token, None)
        return self
