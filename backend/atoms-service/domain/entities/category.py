"""Category domain entity.

Categories group tags through the category_tags join table and may be
flagged private, which hides their atoms from the gallery until one of
their tags is explicitly selected.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from domain.entities.rows import known_columns, parse_timestamp


@dataclass(frozen=True)
class Category:
    """Domain entity representing a named grouping of tags.

    Attributes:
        id (int): Unique identifier.
        name (str): Display name.
        description (Optional[str]): Free text description.
        is_private (bool): Whether atoms tagged from this category are private.
        created_at (Optional[datetime]): Creation timestamp.
    """

    id: int
    name: str
    description: Optional[str] = None
    is_private: bool = False
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Category name cannot be empty")
        if self.is_private is None:
            object.__setattr__(self, "is_private", False)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Category":
        values = known_columns(cls, row)
        values["created_at"] = parse_timestamp(values.get("created_at"))
        return cls(**values)
