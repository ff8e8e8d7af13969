"""SQLAlchemy ORM model for Tag entity.

This module contains the TagORM class that defines the database schema
for tags.

Classes:
    TagORM: SQLAlchemy model for canonical tags.

Architecture:
    This ORM model is part of the Infrastructure layer and should only be used by:
    - SqlAlchemyRemoteStore implementation
    - Database migration scripts
    - Other infrastructure-specific code

    Domain code should use the Tag entity instead of this ORM model.
"""

from datetime import datetime

from infrastructure.models.base import Base
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String


class TagORM(Base):
    """SQLAlchemy ORM model for tags that label atoms.

    Attributes:
        id (int): Primary key.
        name (str): Canonical tag name, unique across all tags.
        count (int): Usage count.
        is_private (bool): Private flag.
        category_id (int): Legacy single-parent category.
        created_at (datetime): Timestamp when tag was created.

    Table Schema:
        - Table name: 'tags'
        - Primary key: id
        - Unique constraint: name

    Example:
        >>> tag_orm = TagORM(name="street art")
        >>> db.add(tag_orm)
        >>> db.commit()
        >>> print(f"Created tag: {tag_orm.id}")
    """

    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)

    name = Column(
        String(100),
        unique=True,
        nullable=False,
        comment="Canonical tag name, must be unique across all tags",
    )

    count = Column(Integer, default=0, nullable=False, comment="Usage count")

    is_private = Column(Boolean, default=False, nullable=False)

    category_id = Column(
        Integer,
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        comment="Legacy single-parent category, superseded by category_tags",
    )

    created_at = Column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
        comment="Timestamp when tag was created",
    )

    def __repr__(self) -> str:
        return f"<TagORM(id={self.id}, name='{self.name}')>"

    def __str__(self) -> str:
        return self.name
