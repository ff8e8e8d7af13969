"""Join-table rows linking atoms, tags, categories and creators.

None of these tables is assumed to carry a unique constraint on its
foreign-key pair; consumers derive sets from them.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from domain.entities.rows import known_columns, parse_timestamp


@dataclass(frozen=True)
class CategoryTag:
    """Row of the category_tags join table."""

    id: Optional[int]
    category_id: int
    tag_id: int
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "CategoryTag":
        values = known_columns(cls, row)
        values.setdefault("id", None)
        values["created_at"] = parse_timestamp(values.get("created_at"))
        return cls(**values)


@dataclass(frozen=True)
class CreatorTag:
    """Row of the creator_tags join table."""

    id: Optional[int]
    creator_id: int
    tag_id: int
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "CreatorTag":
        values = known_columns(cls, row)
        values.setdefault("id", None)
        values["created_at"] = parse_timestamp(values.get("created_at"))
        return cls(**values)


@dataclass(frozen=True)
class AtomRelationship:
    """Parent idea to child atom edge of the idea DAG.

    Raises:
        ValueError: If an atom is made a child of itself.
    """

    parent_atom_id: int
    child_atom_id: int
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.parent_atom_id == self.child_atom_id:
            raise ValueError("Cannot add atom to itself")

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "AtomRelationship":
        values = known_columns(cls, row)
        values["created_at"] = parse_timestamp(values.get("created_at"))
        return cls(**values)
