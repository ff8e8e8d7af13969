"""SQLAlchemy declarative base for all ORM models.

This module provides a shared declarative base that all ORM models inherit from.
Having a centralized base ensures metadata consistency across all models, and
lets the remote store resolve collection names to tables through
``Base.metadata.tables``.

Usage:
    >>> from .base import Base
    >>>
    >>> class MyModel(Base):
    ...     __tablename__ = 'my_table'
    ...     # ... column definitions
"""

from sqlalchemy.orm import declarative_base

# Shared declarative base for all ORM models in the infrastructure layer
Base = declarative_base()
