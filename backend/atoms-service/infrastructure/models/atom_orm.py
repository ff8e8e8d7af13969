"""SQLAlchemy ORM model for Atom entity.

This module contains the AtomORM class that defines the database schema
for atoms.

Classes:
    AtomORM: SQLAlchemy model for cataloged media items.

Architecture:
    This ORM model is part of the Infrastructure layer and should only be used by:
    - SqlAlchemyRemoteStore implementation
    - Database migration scripts
    - Other infrastructure-specific code

    Domain code should use the Atom entity instead of this ORM model.
"""

from datetime import datetime

from infrastructure.models.base import Base
from sqlalchemy import JSON, Boolean, Column, DateTime, Float, Integer, String, Text


class AtomORM(Base):
    """SQLAlchemy ORM model for atoms.

    Tags are stored denormalized as a JSON array of canonical tag names, and
    creators both as the legacy ``creator_name`` string and through the
    atom_creators association table.

    Table Schema:
        - Table name: 'atoms'
        - Primary key: id (autoincrement integer)
        - Indexes: id (primary key index), content_type

    Example:
        >>> atom_orm = AtomORM(title="Sunset", content_type="image", tags=["sky"])
        >>> db.add(atom_orm)
        >>> db.commit()
    """

    __tablename__ = "atoms"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)

    title = Column(String(255), nullable=False, comment="Atom title")

    description = Column(Text, comment="Rich text description")

    content_type = Column(
        String(50),
        nullable=False,
        index=True,
        comment="Open enum: image, video, link, idea, note, recipe, location...",
    )

    link = Column(Text, comment="External link")

    media_source_link = Column(Text, comment="Link to the media itself")

    store_in_database = Column(Boolean, default=True)

    creator_name = Column(Text, comment="Legacy comma-joined creator names")

    tags = Column(
        JSON,
        default=lambda: [],
        nullable=False,
        comment="Ordered set of canonical tag names",
    )

    # "metadata" is reserved on declarative classes, hence the attribute name
    metadata_ = Column("metadata", JSON, comment="Type-specific payload")

    image_path = Column(Text)

    thumbnail_path = Column(Text)

    is_external = Column(Boolean)

    location_latitude = Column(Float)

    location_longitude = Column(Float)

    location_address = Column(Text)

    flag_for_deletion = Column(
        Boolean, default=False, nullable=False, comment="Marked for review/deletion"
    )

    hidden = Column(
        Boolean,
        default=False,
        nullable=False,
        comment="Hidden from the main gallery (idea children)",
    )

    created_at = Column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
        comment="Timestamp when atom was created",
    )

    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
        comment="Timestamp when atom was last updated",
    )

    def __repr__(self) -> str:
        return f"<AtomORM(id={self.id}, title='{self.title}', content_type='{self.content_type}')>"
