"""Association tables for many-to-many relationships in SQLAlchemy ORM.

This module defines the join tables between catalog entities. Each table
carries its own surrogate id and no unique constraint on the foreign-key
pair, matching how the collection store treats them (set-producing joins).

Tables:
    category_tags: Associates categories with tags
    creator_tags: Associates creators with tags
    atom_creators: Associates atoms with creators
    atom_relationships: Parent idea to child atom edges

Architecture:
    These association tables are part of the Infrastructure layer and are
    addressed by name through the remote store.
"""

from datetime import datetime

from infrastructure.models.base import Base
from sqlalchemy import Column, DateTime, ForeignKey, Integer, Table

category_tags = Table(
    "category_tags",
    Base.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "category_id",
        Integer,
        ForeignKey("categories.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), nullable=False),
    Column("created_at", DateTime, default=datetime.utcnow),
    comment="Association table for many-to-many relationship between categories and tags",
)

creator_tags = Table(
    "creator_tags",
    Base.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "creator_id",
        Integer,
        ForeignKey("creators.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), nullable=False),
    Column("created_at", DateTime, default=datetime.utcnow),
    comment="Association table for many-to-many relationship between creators and tags",
)

atom_creators = Table(
    "atom_creators",
    Base.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("atom_id", Integer, ForeignKey("atoms.id", ondelete="CASCADE"), nullable=False),
    Column(
        "creator_id",
        Integer,
        ForeignKey("creators.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("created_at", DateTime, default=datetime.utcnow),
    comment="Association table for many-to-many relationship between atoms and creators",
)

atom_relationships = Table(
    "atom_relationships",
    Base.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "parent_atom_id",
        Integer,
        ForeignKey("atoms.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column(
        "child_atom_id",
        Integer,
        ForeignKey("atoms.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("created_at", DateTime, default=datetime.utcnow),
    comment="Parent idea to child atom edges",
)
