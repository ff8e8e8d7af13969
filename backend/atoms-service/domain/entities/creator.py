"""Creator domain entity."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Mapping, Optional

from domain.entities.rows import known_columns, parse_timestamp


@dataclass(frozen=True)
class Creator:
    """Domain entity representing an attributed author or source.

    Attributes:
        id (int): Unique identifier.
        name (str): Creator name, matched exactly against atoms' creator_name.
        count (int): Usage count.
        link_1 (Optional[str]): First external link.
        link_2 (Optional[str]): Second external link.
        link_3 (Optional[str]): Third external link.
        created_at (Optional[datetime]): Creation timestamp.
    """

    id: int
    name: str
    count: int = 0
    link_1: Optional[str] = None
    link_2: Optional[str] = None
    link_3: Optional[str] = None
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Creator name cannot be empty")
        if self.count is None:
            object.__setattr__(self, "count", 0)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Creator":
        values = known_columns(cls, row)
        values["created_at"] = parse_timestamp(values.get("created_at"))
        return cls(**values)

    @property
    def links(self) -> List[str]:
        """Non-empty external links in order."""
        return [link for link in (self.link_1, self.link_2, self.link_3) if link]
