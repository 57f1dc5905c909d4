from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException

import db
from ranges.config import Settings, get_settings
from ranges.engine import RangeStrategyEngine, StrategySwitchReport
from ranges.errors import InvalidDistance, NoApplicableBand, UnknownStrategy
from ranges.measurement import DistanceMeasurementTool
from ranges.modifiers import ModifierBucket
from ranges.persistence import table_to_dict
from ranges.strategies import default_registry
from scenarios.simple_scenario import seed_entities

logger = logging.getLogger(__name__)


def _report_to_dict(report: StrategySwitchReport) -> dict[str, Any]:
    return {
        "strategy": report.strategy,
        "ok": report.ok,
        "display_refreshed": report.display_refreshed,
        "repository_error": report.repository_error,
        "entities": [
            {"entity_id": r.entity_id, "ok": r.ok, "error": r.error} for r in report.results
        ],
    }


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Composition root: one engine, store, bucket and ruler per app."""
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level)

    store = db.SqliteConfigurationStore(settings.default_strategy, settings.db_path)
    repository = db.SqliteEntityRepository(path=settings.db_path)
    bucket = ModifierBucket()
    engine = RangeStrategyEngine(
        default_registry(settings.increment),
        display=bucket,
        repository=repository,
        concurrency=settings.notify_concurrency,
        timeout=settings.notify_timeout,
    )
    ruler = DistanceMeasurementTool(engine, bucket)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db.init_db(settings.db_path)
        added = seed_entities(settings.db_path)
        store.ensure_strategy_setting()
        if added:
            logger.info("seeded %d sample entities", added)
        try:
            await engine.update(store)
        except UnknownStrategy as e:
            # A stale setting must not keep the service down; stay on the default.
            logger.error("%s; keeping %s", e, engine.strategy)
        yield

    app = FastAPI(title="Range Strategy Service", lifespan=lifespan)
    app.state.engine = engine
    app.state.store = store
    app.state.bucket = bucket

    @app.get("/strategy")
    def get_strategy():
        return {"strategy": engine.strategy, "modifiers": list(engine.derived_modifiers)}

    @app.put("/strategy")
    async def put_strategy(payload: Dict[str, Any]):
        name = str(payload.get("strategy", "")).strip()
        if name not in engine.registry:
            raise HTTPException(status_code=400, detail=f"Unknown strategy: {name!r}")
        store.write_strategy_setting(name)
        report = await engine.update(store)
        return _report_to_dict(report)

    @app.get("/strategies")
    def list_strategies():
        return {"strategies": engine.strategies(), "active": engine.strategy}

    @app.get("/ranges")
    def get_ranges():
        return {"strategy": engine.strategy, **table_to_dict(engine.active_table)}

    @app.get("/penalty")
    def get_penalty(distance: float):
        try:
            band = engine.band_for_distance(distance)
        except InvalidDistance as e:
            raise HTTPException(status_code=422, detail=str(e))
        except NoApplicableBand as e:
            raise HTTPException(status_code=404, detail=str(e))
        return {"distance": distance, "penalty": band.penalty, "label": band.modifier_label}

    @app.post("/measure")
    def post_measure(payload: Dict[str, Any]):
        raw = payload.get("segments", [])
        if not isinstance(raw, list) or not raw:
            raise HTTPException(status_code=400, detail="segments must be a non-empty list")
        try:
            segments = [float(s) for s in raw]
        except (TypeError, ValueError):
            raise HTTPException(status_code=400, detail="segments must be numbers")
        units = str(payload.get("units", ruler.units))
        labels = ruler.measure(segments, units)
        added = ruler.end_measurement(dragged=bool(payload.get("dragged", False)))
        return {"labels": labels, "added": added, "bucket": bucket.to_dict()}

    @app.get("/modifiers")
    def get_modifiers():
        return bucket.to_dict()

    @app.delete("/modifiers")
    def clear_modifiers():
        bucket.clear()
        return bucket.to_dict()

    @app.get("/entities")
    def list_entities():
        return {
            "entities": [
                {"entity_id": e.entity_id, "name": e.name, "permission": e.permission}
                for e in repository.list_all()
            ]
        }

    @app.get("/entities/{entity_id}")
    def get_entity(entity_id: str):
        ref = repository.get(entity_id)
        if ref is None:
            raise HTTPException(status_code=404, detail="No such entity")
        table = ref.range_table()
        return {
            "entity_id": ref.entity_id,
            "name": ref.name,
            "permission": ref.permission,
            "ranges": None if table is None else table_to_dict(table),
        }

    return app


app = create_app()
