"""Reconcile source vocabularies with the target application's."""

from cookbookconverter.normalize.units import (
    UNIT_MAPPING,
    QuantityType,
    UnitReconciler,
    UnitResolution,
)

__all__ = [
    "QuantityType",
    "UNIT_MAPPING",
    "UnitReconciler",
    "UnitResolution",
]
