# ranges/persistence.py
from __future__ import annotations

import json
from typing import Any

from ranges.bands import Bound, Bounded, RangeBand, RangeTable, Unbounded


SCHEMA_VERSION = 1


def _bound_to_dict(b: Bound) -> dict[str, Any]:
    if isinstance(b, Unbounded):
        return {"kind": "unbounded"}
    return {"kind": "bounded", "max": b.max}


def _bound_from_dict(d: dict[str, Any]) -> Bound:
    kind = d.get("kind", "bounded")
    if kind == "unbounded":
        return Unbounded()
    if kind == "bounded":
        return Bounded(max=d["max"])
    raise ValueError(f"unknown bound kind {kind!r}")


def _band_to_dict(b: RangeBand) -> dict[str, Any]:
    return {
        "modifier_label": b.modifier_label,
        "bound": _bound_to_dict(b.bound),
        "penalty": b.penalty,
        "description": b.description,
    }


def _band_from_dict(d: dict[str, Any]) -> RangeBand:
    return RangeBand(
        modifier_label=d["modifier_label"],
        bound=_bound_from_dict(d["bound"]),
        penalty=int(d["penalty"]),
        description=d.get("description", ""),
    )


def table_to_dict(table: RangeTable) -> dict[str, Any]:
    return {
        "schema_version": SCHEMA_VERSION,
        "bands": [_band_to_dict(b) for b in table],
    }


def table_from_dict(d: dict[str, Any]) -> RangeTable:
    ver = int(d.get("schema_version", 0))
    if ver != SCHEMA_VERSION:
        raise ValueError(f"Unsupported range table schema_version={ver}")
    return RangeTable(bands=tuple(_band_from_dict(b) for b in d.get("bands", [])))


def table_to_json(table: RangeTable) -> str:
    return json.dumps(table_to_dict(table), sort_keys=True, separators=(",", ":"))


def table_from_json(s: str) -> RangeTable:
    return table_from_dict(json.loads(s))
