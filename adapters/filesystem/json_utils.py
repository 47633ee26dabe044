from __future__ import annotations

from pathlib import Path
from typing import Any, List

import orjson


def load_json(path: Path) -> Any:
    return orjson.loads(path.read_bytes())


def load_records(path: Path, key: str) -> List[dict[str, Any]]:
    """Accept either a bare JSON array or an object wrapping the array under `key`."""
    data = load_json(path)
    if isinstance(data, dict):
        data = data.get(key, [])
    if not isinstance(data, list):
        msg = f"Expected a list of {key} in {path}"
        raise ValueError(msg)
    return [item for item in data if isinstance(item, dict)]


def dump_json_bytes(payload: Any) -> bytes:
    return orjson.dumps(payload, option=orjson.OPT_INDENT_2)
