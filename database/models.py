"""
SQLAlchemy ORM models mirroring the ``users`` table.
"""

from __future__ import annotations

from sqlalchemy import Column, String, Text
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class UserRecord(Base):
    __tablename__ = "users"

    # Opaque UUID text; timestamps are UTC text so ordering is lexical.
    id = Column(String(36), primary_key=True)
    name = Column(Text, nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(Text, nullable=False)
    created_at = Column(String(32), nullable=False)
    updated_at = Column(String(32), nullable=False)
