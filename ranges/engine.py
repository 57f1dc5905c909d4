from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from ranges.bands import RangeBand, RangeTable, check_distance
from ranges.collaborators import ConfigurationStore, EntityRef, EntityRepository, ModifierDisplay
from ranges.errors import NoApplicableBand
from ranges.modifiers import build_modifier_list
from ranges.strategies import RangeStrategy, StrategyId, StrategyRegistry, default_registry, strategy_name

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 8
DEFAULT_TIMEOUT = 5.0


@dataclass(frozen=True, slots=True)
class EntityUpdateResult:
    entity_id: str
    ok: bool
    error: Optional[str] = None


@dataclass(frozen=True, slots=True)
class StrategySwitchReport:
    """
    Outcome of one strategy switch.

    The switch itself always took effect; the remaining fields describe the
    best-effort notifications that followed it.
    """
    strategy: str
    table: RangeTable
    display_refreshed: bool
    results: tuple[EntityUpdateResult, ...] = ()
    repository_error: Optional[str] = None

    @property
    def failures(self) -> tuple[EntityUpdateResult, ...]:
        return tuple(r for r in self.results if not r.ok)

    @property
    def ok(self) -> bool:
        return not self.failures and self.repository_error is None


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


async def _apply_table(entity: EntityRef, table: RangeTable) -> Any:
    fn = entity.apply_range_table
    if inspect.iscoroutinefunction(fn):
        return await fn(table)
    # Blocking implementations (e.g. SQLite) run in the default executor.
    loop = asyncio.get_running_loop()
    return await _maybe_await(await loop.run_in_executor(None, fn, table))


class RangeStrategyEngine:
    """
    Owns the active range table and the modifier strings derived from it.

    Lookups are pure and synchronous. select_strategy() is the only mutation;
    it swaps the table reference, rebuilds the derived list, then notifies the
    modifier display and every updatable entity.
    """

    def __init__(
        self,
        registry: Optional[StrategyRegistry] = None,
        default: StrategyId = RangeStrategy.STANDARD,
        *,
        display: Optional[ModifierDisplay] = None,
        repository: Optional[EntityRepository] = None,
        concurrency: int = DEFAULT_CONCURRENCY,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
    ):
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self.registry = registry if registry is not None else default_registry()
        self.display = display
        self.repository = repository
        self.concurrency = concurrency
        self.timeout = timeout

        self.strategy: str = strategy_name(default)
        self.active_table: RangeTable = self.registry.get(default)
        self.derived_modifiers: tuple[str, ...] = ()
        self.rebuild_derived_modifiers()

    def set_collaborators(
        self,
        display: Optional[ModifierDisplay] = None,
        repository: Optional[EntityRepository] = None,
    ) -> None:
        if display is not None:
            self.display = display
        if repository is not None:
            self.repository = repository

    def strategies(self) -> list[str]:
        return self.registry.names()

    # --- lookup ---

    def band_for_distance(self, distance: float) -> RangeBand:
        d = check_distance(distance)
        band = self.active_table.find(d)
        if band is None:
            raise NoApplicableBand(d, self.strategy)
        return band

    def penalty_for_distance(self, distance: float) -> int:
        return self.band_for_distance(distance).penalty

    # --- derived state ---

    def rebuild_derived_modifiers(self) -> None:
        # Built off to the side; readers only ever see a complete tuple.
        self.derived_modifiers = build_modifier_list(self.active_table)

    # --- strategy switching ---

    async def select_strategy(self, strategy: StrategyId) -> StrategySwitchReport:
        table = self.registry.get(strategy)  # raises UnknownStrategy, state untouched
        name = strategy_name(strategy)

        self.active_table = table
        self.strategy = name
        self.rebuild_derived_modifiers()
        logger.info(
            "range strategy set to %s (%d bands, %d modifiers)",
            name, len(table), len(self.derived_modifiers),
        )

        refreshed = await self._refresh_display()
        results, repo_error = await self._propagate(table)

        report = StrategySwitchReport(
            strategy=name,
            table=table,
            display_refreshed=refreshed,
            results=results,
            repository_error=repo_error,
        )
        if report.failures:
            logger.warning(
                "range table not applied to %d of %d entities: %s",
                len(report.failures), len(results),
                ", ".join(r.entity_id for r in report.failures),
            )
        return report

    async def update(self, store: ConfigurationStore) -> StrategySwitchReport:
        """Re-read the configured strategy and switch to it."""
        return await self.select_strategy(store.read_strategy_setting())

    async def _refresh_display(self) -> bool:
        if self.display is None:
            return False
        try:
            await _maybe_await(self.display.refresh(self.derived_modifiers))
        except Exception:
            logger.warning("modifier display refresh failed", exc_info=True)
            return False
        return True

    async def _propagate(self, table: RangeTable) -> tuple[tuple[EntityUpdateResult, ...], Optional[str]]:
        if self.repository is None:
            return (), None
        try:
            entities: Sequence[EntityRef] = list(self.repository.list_updatable_entities())
        except Exception as e:
            logger.warning("could not list entities for range update", exc_info=True)
            return (), f"{type(e).__name__}: {e}"

        sem = asyncio.Semaphore(self.concurrency)

        async def apply(entity: EntityRef) -> EntityUpdateResult:
            entity_id = str(getattr(entity, "entity_id", entity))
            async with sem:
                try:
                    outcome = await asyncio.wait_for(_apply_table(entity, table), self.timeout)
                except asyncio.TimeoutError:
                    logger.warning("range update timed out for entity %s", entity_id)
                    return EntityUpdateResult(entity_id, False, f"timed out after {self.timeout}s")
                except Exception as e:
                    logger.warning("range update failed for entity %s: %s", entity_id, e)
                    return EntityUpdateResult(entity_id, False, f"{type(e).__name__}: {e}")
            if outcome is False:
                return EntityUpdateResult(entity_id, False, "rejected")
            return EntityUpdateResult(entity_id, True)

        results = await asyncio.gather(*(apply(e) for e in entities))
        return tuple(results), None
