# cms/entities.py
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    false,
    true,
)
from sqlalchemy.orm import Mapped, declarative_base, mapped_column, relationship

from typing import TypeAlias
EncodedJson: TypeAlias = str

Base = declarative_base()

# primary keys are signed 64-bit on every backend
MAX_ID = 2 ** 63 - 1


def id_in_range(value: int) -> bool:
    return -MAX_ID <= value <= MAX_ID


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CreatedAtMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )


class TimestampMixin(CreatedAtMixin):
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )


class Article(Base, TimestampMixin):
    __tablename__ = "article"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    slug: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    title: Mapped[str] = mapped_column(String, nullable=False)
    excerpt: Mapped[str] = mapped_column(Text, nullable=False)
    date: Mapped[str] = mapped_column(String, nullable=False)
    read_time: Mapped[str] = mapped_column(String, nullable=False)
    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=false(), default=False)

    # encoded JSON blobs, see cms.flex_codec
    tags: Mapped[EncodedJson] = mapped_column(Text, nullable=False, default="[]")
    epigraph: Mapped[EncodedJson | None] = mapped_column(Text)
    content: Mapped[EncodedJson] = mapped_column(Text, nullable=False, default="[]")


class Project(Base, TimestampMixin):
    __tablename__ = "project"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    slug: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    year: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="Active")
    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=false(), default=False)
    role: Mapped[str | None] = mapped_column(String)
    tagline: Mapped[str | None] = mapped_column(String)

    tech: Mapped[EncodedJson] = mapped_column(Text, nullable=False, default="[]")
    links: Mapped[EncodedJson | None] = mapped_column(Text)
    philosophy: Mapped[EncodedJson | None] = mapped_column(Text)
    sections: Mapped[EncodedJson | None] = mapped_column(Text)
    gallery: Mapped[EncodedJson | None] = mapped_column(Text)


class Quote(Base):
    __tablename__ = "quote"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str] = mapped_column(String, nullable=False)
    source: Mapped[str] = mapped_column(String, nullable=False)
    category: Mapped[str | None] = mapped_column(String)


class DailyIntention(Base, CreatedAtMixin):
    __tablename__ = "daily_intention"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=true(), default=True)
    order: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0", default=0)

    __table_args__ = (
        Index("ix_daily_intention_active_order", "active", "order"),
    )


class Contemplation(Base, CreatedAtMixin):
    __tablename__ = "contemplation"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    question: Mapped[str] = mapped_column(Text, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=true(), default=True)
    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=false(), default=False)
    order: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0", default=0)

    # soft ownership: answers survive their contemplation (see cms.integrity)
    answers: Mapped[list["StickyNote"]] = relationship(
        back_populates="contemplation",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_contemplation_active_order", "active", "order"),
    )


class StickyNote(Base, CreatedAtMixin):
    __tablename__ = "sticky_note"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    question: Mapped[str] = mapped_column(Text, nullable=False)
    answer: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str] = mapped_column(String, nullable=False)
    color: Mapped[str] = mapped_column(String, nullable=False, default="gold")
    position_x: Mapped[int] = mapped_column(Integer, nullable=False, default=20)
    position_y: Mapped[int] = mapped_column(Integer, nullable=False, default=20)
    rotation: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    approved: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=false(), default=False)

    contemplation_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("contemplation.id", ondelete="SET NULL"),
        nullable=True,
    )
    contemplation: Mapped[Contemplation | None] = relationship(back_populates="answers")

    __table_args__ = (
        Index("ix_sticky_note_contemplation_id", "contemplation_id"),
        Index("ix_sticky_note_approved", "approved"),
    )


class Profile(Base):
    __tablename__ = "profile"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    title: Mapped[str] = mapped_column(String, nullable=False)
    bio: Mapped[str] = mapped_column(Text, nullable=False)
    avatar: Mapped[str | None] = mapped_column(String)
    location: Mapped[str | None] = mapped_column(String)
    email: Mapped[str | None] = mapped_column(String)

    social: Mapped[EncodedJson | None] = mapped_column(Text)
