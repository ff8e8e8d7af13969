"""SQLAlchemy ORM models for categories, creators and settings.

Classes:
    CategoryORM: Named grouping of tags, optionally private.
    CreatorORM: Attributed author or source of atoms.
    SettingORM: Key/value preference row (default category, favorite creators).
"""

from datetime import datetime

from infrastructure.models.base import Base
from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String, Text


class CategoryORM(Base):
    """SQLAlchemy ORM model for categories.

    Table Schema:
        - Table name: 'categories'
        - Primary key: id
    """

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)

    name = Column(String(255), nullable=False)

    description = Column(Text)

    is_private = Column(
        Boolean,
        default=False,
        nullable=False,
        comment="Atoms carrying tags of a private category are hidden by default",
    )

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<CategoryORM(id={self.id}, name='{self.name}')>"


class CreatorORM(Base):
    """SQLAlchemy ORM model for creators.

    Table Schema:
        - Table name: 'creators'
        - Primary key: id
    """

    __tablename__ = "creators"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)

    name = Column(String(255), nullable=False, comment="Matched exactly against atoms")

    count = Column(Integer, default=0, nullable=False)

    link_1 = Column(Text)

    link_2 = Column(Text)

    link_3 = Column(Text)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<CreatorORM(id={self.id}, name='{self.name}')>"


class SettingORM(Base):
    """SQLAlchemy ORM model for key/value settings.

    Table Schema:
        - Table name: 'settings'
        - Primary key: key
    """

    __tablename__ = "settings"

    key = Column(String(100), primary_key=True)

    value = Column(JSON, comment="JSON payload, e.g. {'categoryId': 3}")

    updated_at = Column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<SettingORM(key='{self.key}')>"
