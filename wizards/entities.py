# wizards/entities.py
from typing import Any, Optional

from sqlalchemy import JSON, Integer, String, Text
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

Base = declarative_base()


class Event(Base):
    __tablename__ = "event"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[Optional[str]] = mapped_column(Text)
    subtitle: Mapped[Optional[str]] = mapped_column(Text)
    target_group: Mapped[Optional[str]] = mapped_column(Text)
    previous_feedback: Mapped[Optional[str]] = mapped_column(Text)
    purpose: Mapped[Optional[str]] = mapped_column(Text)
    audience_profile: Mapped[Optional[str]] = mapped_column(Text)
    program_notes: Mapped[Optional[str]] = mapped_column(Text)
    public_description: Mapped[Optional[str]] = mapped_column(Text)


class Bento(Base):
    """A reusable activity template from the bento library."""

    __tablename__ = "bento_library"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    short_description: Mapped[Optional[str]] = mapped_column(Text)
    description: Mapped[Optional[str]] = mapped_column(Text)
    purpose_category: Mapped[Optional[str]] = mapped_column(String)
    category: Mapped[Optional[str]] = mapped_column(String)
    type: Mapped[Optional[str]] = mapped_column(String)
    hopa_profiles: Mapped[Optional[Any]] = mapped_column(JSON)
    eng_level: Mapped[Optional[int]] = mapped_column(Integer)
    nfi_index: Mapped[Optional[int]] = mapped_column(Integer)
    effects: Mapped[Optional[str]] = mapped_column(Text)
    duration_minutes: Mapped[Optional[int]] = mapped_column(Integer)
    reflection_notes: Mapped[Optional[str]] = mapped_column(Text)
    interaction_notes: Mapped[Optional[str]] = mapped_column(Text)

    step_1: Mapped[Optional[str]] = mapped_column(Text)
    step_2: Mapped[Optional[str]] = mapped_column(Text)
    step_3: Mapped[Optional[str]] = mapped_column(Text)
    step_4: Mapped[Optional[str]] = mapped_column(Text)
    step_5: Mapped[Optional[str]] = mapped_column(Text)
    step_1_duration: Mapped[Optional[int]] = mapped_column(Integer)
    step_2_duration: Mapped[Optional[int]] = mapped_column(Integer)
    step_3_duration: Mapped[Optional[int]] = mapped_column(Integer)
    step_4_duration: Mapped[Optional[int]] = mapped_column(Integer)
    step_5_duration: Mapped[Optional[int]] = mapped_column(Integer)


class Tip(Base):
    __tablename__ = "tipsbank"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[Optional[str]] = mapped_column(Text)
    tags: Mapped[Optional[str]] = mapped_column(Text)
