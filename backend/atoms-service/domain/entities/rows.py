"""Helpers for mapping remote store rows onto domain entities.

Remote rows are plain dictionaries. Depending on the store implementation
timestamps arrive either as ``datetime`` objects (SQLAlchemy) or as ISO-8601
strings (PostgREST), so entities parse them through ``parse_timestamp``.
"""

from dataclasses import fields
from datetime import datetime
from typing import Any, Dict, FrozenSet, Mapping, Optional, Union


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse a timestamp column value coming from a remote row."""
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def field_names(entity_cls) -> FrozenSet[str]:
    """Return the dataclass field names of an entity class."""
    return frozenset(f.name for f in fields(entity_cls))


def known_columns(entity_cls, row: Mapping[str, Any]) -> Dict[str, Any]:
    """Keep only the keys of ``row`` that are fields of ``entity_cls``.

    Remote tables may carry columns the domain does not model
    (e.g. ``private_password`` on categories); those are dropped.
    """
    names = field_names(entity_cls)
    return {key: value for key, value in row.items() if key in names}
