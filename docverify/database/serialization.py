"""Conversion between domain dataclasses and JSONB column values."""

import json
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from functools import partial
from typing import Any

from psycopg.types.json import Jsonb

from docverify.extraction.dates import parse_timestamp


def _default(value: object) -> object:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


_dumps = partial(json.dumps, default=_default)


def plain(value: Any) -> Any:
    """Dataclasses (and sequences of them) as JSON-ready dicts and lists."""
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    if isinstance(value, (list, tuple)):
        return [plain(item) for item in value]
    if isinstance(value, dict):
        return {key: plain(item) for key, item in value.items()}
    return value


def to_jsonb(value: Any) -> Jsonb:
    return Jsonb(plain(value), dumps=_dumps)


def timestamp(value: Any) -> datetime | None:
    """Read back a timestamp that went through JSON as an ISO string."""
    return parse_timestamp(value)
