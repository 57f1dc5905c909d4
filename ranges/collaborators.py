"""
Interfaces the engine calls out to. Hosts provide the implementations
(see db.py and ranges.modifiers.ModifierBucket).
"""
from __future__ import annotations

from typing import Awaitable, Protocol, Sequence, Union, runtime_checkable

from ranges.bands import RangeTable


@runtime_checkable
class ConfigurationStore(Protocol):
    def read_strategy_setting(self) -> str: ...


@runtime_checkable
class ModifierDisplay(Protocol):
    def refresh(self, derived_modifiers: Sequence[str]) -> None: ...


@runtime_checkable
class EntityRef(Protocol):
    entity_id: str

    def apply_range_table(self, table: RangeTable) -> Union[bool, None, Awaitable[Union[bool, None]]]:
        """Store the table on the entity. False (or raising) means failure."""
        ...


@runtime_checkable
class EntityRepository(Protocol):
    def list_updatable_entities(self) -> Sequence[EntityRef]:
        """Entities the current user may modify; authorization is done here."""
        ...


@runtime_checkable
class DistanceMeasurementCallback(Protocol):
    def penalty_for_distance(self, distance: float) -> int: ...
