# =============================================================================
# File: cms/models.py
# Purpose: ORM models (SystemParameter, Tag, User, ScheduledTask)
# Notes:
# - SQLAlchemy 2.0 style (Mapped[...] + mapped_column)
# - JSON columns hold the free-form payloads (parameter values, task config)
# - DateTime stored naive, interpreted as UTC app-side
# =============================================================================
from __future__ import annotations

import datetime as dt
import re
from sqlalchemy import (
    Integer, String, DateTime, Boolean, Float,
    ForeignKey, Text, CheckConstraint, func
)
from sqlalchemy.types import JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from .db import Base

PARAMETER_TYPES = ("string", "number", "boolean", "array", "select")

DEFAULT_TAG_COLOR = "#3b82f6"
TAG_COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")


class SystemParameter(Base):
    __tablename__ = "system_parameters"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    key: Mapped[str] = mapped_column(String(100), unique=True, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    value: Mapped[object] = mapped_column(JSON, nullable=True)
    # string | number | boolean | array | select
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    category: Mapped[str] = mapped_column(String(50), index=True, nullable=False)

    options: Mapped[list | None] = mapped_column(JSON, nullable=True)
    min: Mapped[float | None] = mapped_column(Float, nullable=True)
    max: Mapped[float | None] = mapped_column(Float, nullable=True)
    unit: Mapped[str | None] = mapped_column(String(20), nullable=True)

    is_required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_editable: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    default_value: Mapped[object] = mapped_column(JSON, nullable=True)

    created_at: Mapped[dt.datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    # user | moderator | admin
    role: Mapped[str] = mapped_column(String(20), default="user", nullable=False)

    created_at: Mapped[dt.datetime] = mapped_column(DateTime, server_default=func.now())

    @property
    def is_staff(self) -> bool:
        return self.role in ("admin", "moderator")


class Tag(Base):
    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    description: Mapped[str] = mapped_column(String(200), default="", nullable=False)
    color: Mapped[str] = mapped_column(String(7), default=DEFAULT_TAG_COLOR, nullable=False)

    # denormalized: number of posts referencing this tag
    post_count: Mapped[int] = mapped_column(Integer, default=0, index=True, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_by: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    creator = relationship("User")

    created_at: Mapped[dt.datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint("post_count >= 0", name="ck_tags_post_count_positive"),
    )

    @validates("color")
    def _check_color(self, _key, value):
        if value is not None and not TAG_COLOR_RE.match(value):
            raise ValueError(f"invalid tag color: {value!r}")
        return value


class ScheduledTask(Base):
    __tablename__ = "scheduled_tasks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # cleanupUnusedImages, ...
    task_type: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    is_enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # cron expression, e.g. "0 2 * * *"
    schedule: Mapped[str] = mapped_column(String(50), nullable=False)
    next_run: Mapped[dt.datetime | None] = mapped_column(DateTime, nullable=True)
    last_run: Mapped[dt.datetime | None] = mapped_column(DateTime, nullable=True)

    # idle | running | failed
    status: Mapped[str] = mapped_column(String(20), default="idle", nullable=False)
    config: Mapped[dict | None] = mapped_column(JSON, nullable=True)
