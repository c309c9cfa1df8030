from __future__ import annotations

import dataclasses
import json
from datetime import datetime
from typing import Any


def _default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%dT%H:%M:%SZ")
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def format_json(rows: list[Any]) -> str:
    return json.dumps([dataclasses.asdict(row) for row in rows], indent=2, default=_default)
