from __future__ import annotations

import asyncio

import db
from ranges.config import get_settings
from ranges.engine import RangeStrategyEngine
from ranges.errors import InvalidDistance, NoApplicableBand, UnknownStrategy
from ranges.measurement import DistanceMeasurementTool
from ranges.modifiers import ModifierBucket, signed
from ranges.strategies import default_registry


HELP = [
    "Commands:",
    "  strategy                 - show active strategy",
    "  strategy <name>          - switch strategy (saved to settings)",
    "  strategies               - list available strategies",
    "  table                    - print the active range table",
    "  mods                     - list range modifiers offered to the bucket",
    "  range <distance>         - range penalty for a distance",
    "  measure <d1> [d2 ...]    - measure a path and apply its range modifier",
    "  move <d1> [d2 ...]       - measure a movement path (no modifier applied)",
    "  bucket                   - show applied modifiers",
    "  clear                    - clear applied modifiers",
]


def _parse_distances(parts: list[str]) -> list[float] | None:
    try:
        return [float(p) for p in parts]
    except ValueError:
        return None


def format_table(engine: RangeStrategyEngine) -> list[str]:
    table = engine.active_table
    out = [f"{engine.strategy} ({len(table)} bands)"]
    for i, band in enumerate(table):
        out.append(f"  <= {table.bound_text(i):>6}  {signed(band.penalty):>4}  {band.modifier_label}")
    return out


def handle_command(engine: RangeStrategyEngine, store, ruler: DistanceMeasurementTool, line: str) -> list[str]:
    parts = line.strip().split()
    if not parts:
        return []
    head = parts[0].lower()

    if head == "help":
        return list(HELP)

    if head == "strategy":
        if len(parts) == 1:
            return [f"Active strategy: {engine.strategy}"]
        name = " ".join(parts[1:])
        if name not in engine.registry:
            return [f"ERROR: {UnknownStrategy(name)}"]
        store.write_strategy_setting(name)
        report = asyncio.run(engine.update(store))
        out = [f"Strategy set to {report.strategy}"]
        if report.results:
            out.append(f"Updated {len(report.results) - len(report.failures)}/{len(report.results)} entities")
        for r in report.failures:
            out.append(f"  failed: {r.entity_id} ({r.error})")
        return out

    if head == "strategies":
        return [("* " if n == engine.strategy else "  ") + n for n in engine.strategies()]

    if head == "table":
        return format_table(engine)

    if head == "mods":
        return list(engine.derived_modifiers) or ["(no modifiers)"]

    if head == "range":
        if len(parts) != 2:
            return ["Usage: range <distance>"]
        ds = _parse_distances(parts[1:])
        if ds is None:
            return ["distance must be a number"]
        try:
            band = engine.band_for_distance(ds[0])
        except (InvalidDistance, NoApplicableBand) as e:
            return [f"ERROR: {e}"]
        return [f"{signed(band.penalty)} {band.modifier_label}"]

    if head in ("measure", "move"):
        if len(parts) < 2:
            return [f"Usage: {head} <d1> [d2 ...]"]
        ds = _parse_distances(parts[1:])
        if ds is None:
            return ["distances must be numbers"]
        labels = ruler.measure(ds)
        added = ruler.end_measurement(dragged=(head == "move"))
        return labels + (["Range modifier applied"] if added else [])

    if head == "bucket":
        if ruler.bucket is None or not ruler.bucket.active:
            return ["(no modifiers applied)"]
        return list(ruler.bucket.active) + [f"Total: {signed(ruler.bucket.total())}"]

    if head == "clear":
        if ruler.bucket is not None:
            ruler.bucket.clear()
        return ["Cleared"]

    return [f"Unknown command: {line.strip()}"]


def run_repl() -> None:
    settings = get_settings()
    store = db.SqliteConfigurationStore(settings.default_strategy, settings.db_path)
    bucket = ModifierBucket()
    engine = RangeStrategyEngine(
        default_registry(settings.increment),
        display=bucket,
        repository=db.SqliteEntityRepository(path=settings.db_path),
        concurrency=settings.notify_concurrency,
        timeout=settings.notify_timeout,
    )
    ruler = DistanceMeasurementTool(engine, bucket)
    store.ensure_strategy_setting()
    try:
        asyncio.run(engine.update(store))
    except UnknownStrategy as e:
        print(f"{e}; using {engine.strategy}")

    print("Range Strategy REPL")
    print("Type 'help' for commands. Type 'exit' to quit.\n")

    while True:
        try:
            raw = input(f"[{engine.strategy}]> ").strip()
        except EOFError:
            break
        if raw.lower() in ("quit", "exit"):
            break
        for line in handle_command(engine, store, ruler, raw):
            print(line)


if __name__ == "__main__":
    run_repl()
