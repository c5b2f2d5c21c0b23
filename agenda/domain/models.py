"""Domain models for the agenda scheduling core."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import StrEnum
from typing import Annotated

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    field_validator,
    model_validator,
)


class SessionType(StrEnum):
    KEYNOTE = "keynote"
    TALK = "talk"
    PANEL = "panel"
    WORKSHOP = "workshop"
    NETWORKING = "networking"
    BREAK = "break"


StageName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def _as_utc(value: datetime) -> datetime:
    """Naive datetimes are read as UTC so they compare with aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _unique(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]
ShortText = Annotated[str, StringConstraints(strip_whitespace=True, max_length=50)]
TierName = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)
]


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


class Session(BaseModel):
    id: str = Field(default_factory=_new_id)
    title: str
    description: str | None = None
    type: SessionType = SessionType.TALK
    start_time: UtcDatetime
    end_time: UtcDatetime
    stage: StageName
    speaker_ids: list[str] = Field(default_factory=list)
    sponsor_ids: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    capacity: int | None = Field(default=None, ge=1)
    is_highlight: bool = False
    is_visible: bool = True
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
    deleted_at: datetime | None = None
    deleted_by: str | None = None
    delete_reason: str | None = None

    @field_validator("speaker_ids", "sponsor_ids")
    @classmethod
    def _dedupe(cls, values: list[str]) -> list[str]:
        return _unique(values)

    @field_validator("tags")
    @classmethod
    def _normalize_tags(cls, values: list[str]) -> list[str]:
        return _unique([t.strip().lower() for t in values if t.strip()])

    @model_validator(mode="after")
    def _end_after_start(self) -> Session:
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def duration_minutes(self) -> int:
        return round((self.end_time - self.start_time).total_seconds() / 60)

    def is_live(self, now: datetime) -> bool:
        return self.start_time <= now < self.end_time

    def is_upcoming(self, now: datetime) -> bool:
        return self.start_time > now

    def is_past(self, now: datetime) -> bool:
        return self.end_time <= now


class SessionCandidate(BaseModel):
    """Projection of a proposed or edited session used for conflict checks.

    Built per request and never stored. ``exclude_id`` names the session being
    edited so it is not reported as conflicting with itself.
    """

    model_config = ConfigDict(frozen=True)

    start_time: UtcDatetime
    end_time: UtcDatetime
    stage: StageName
    speaker_ids: frozenset[str] = frozenset()
    exclude_id: str | None = None

    @model_validator(mode="after")
    def _start_before_end(self) -> SessionCandidate:
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self

    @classmethod
    def from_session(cls, session: Session) -> SessionCandidate:
        return cls(
            start_time=session.start_time,
            end_time=session.end_time,
            stage=session.stage,
            speaker_ids=frozenset(session.speaker_ids),
            exclude_id=session.id,
        )


class ConflictReport(BaseModel):
    has_conflicts: bool = False
    conflicts: list[Session] = Field(default_factory=list)

    @model_validator(mode="after")
    def _flag_matches_list(self) -> ConflictReport:
        if self.has_conflicts != bool(self.conflicts):
            raise ValueError("has_conflicts must be true exactly when conflicts exist")
        return self

    @classmethod
    def from_conflicts(cls, conflicts: list[Session]) -> ConflictReport:
        return cls(has_conflicts=bool(conflicts), conflicts=conflicts)


# ---------------------------------------------------------------------------
# Sponsor tiers
# ---------------------------------------------------------------------------


class LocalizedName(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    pt_br: ShortText = Field(alias="pt-BR")
    en: ShortText


class SponsorTier(BaseModel):
    """A sponsor tier; ``order`` is unique across all tiers in a store."""

    id: str = Field(default_factory=_new_id)
    name: TierName
    display_name: LocalizedName
    order: int
    max_posts: int = Field(default=5, ge=0)


# ---------------------------------------------------------------------------
# Request DTOs
# ---------------------------------------------------------------------------


class SessionCreate(BaseModel):
    title: str
    description: str | None = None
    type: SessionType = SessionType.TALK
    start_time: UtcDatetime
    end_time: UtcDatetime
    stage: StageName
    speaker_ids: list[str] = Field(default_factory=list)
    sponsor_ids: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    capacity: int | None = Field(default=None, ge=1)
    is_highlight: bool = False
    is_visible: bool = True


class SessionUpdate(BaseModel):
    """Partial update; only fields explicitly sent are applied."""

    title: str | None = None
    description: str | None = None
    type: SessionType | None = None
    start_time: UtcDatetime | None = None
    end_time: UtcDatetime | None = None
    stage: StageName | None = None
    speaker_ids: list[str] | None = None
    sponsor_ids: list[str] | None = None
    tags: list[str] | None = None
    capacity: int | None = Field(default=None, ge=1)
    is_highlight: bool | None = None
    is_visible: bool | None = None


class SponsorTierCreate(BaseModel):
    name: TierName
    display_name: LocalizedName
    order: int | None = Field(default=None, ge=1)
    max_posts: int = Field(default=5, ge=0)


class ReorderTiersRequest(BaseModel):
    tier_ids: list[str] = Field(min_length=1)
