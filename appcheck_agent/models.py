from __future__ import annotations

import math
from datetime import date, datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

StoreKind = Literal["google", "apple"]
Severity = Literal["low", "medium", "high", "critical"]
RiskLevel = Literal["safe", "low", "medium", "high", "critical"]

MAX_REVIEW_SAMPLE = 5

# Display formats seen on storefront listings, e.g. "Jan 5, 2020".
_LISTING_DATE_FORMATS = ("%b %d, %Y", "%B %d, %Y", "%d %b %Y")


def _coerce_datetime(value: Any) -> datetime | None:
    """Best-effort date parsing. Anything we can't read is treated as absent."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)):
        # Storefronts report "updated" as epoch milliseconds; 0 means "no date".
        if not value > 0:
            return None
        try:
            dt = datetime.fromtimestamp(float(value) / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(raw)
        except ValueError:
            dt = None
            for fmt in _LISTING_DATE_FORMATS:
                try:
                    dt = datetime.strptime(raw, fmt)
                    break
                except ValueError:
                    continue
            if dt is None:
                return None
    else:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _coerce_score(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return None if math.isnan(value) else value
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(parsed) else parsed


class ReviewSample(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: float | None = None
    text: str = ""
    title: str | None = None
    user_name: str | None = None

    @field_validator("score", mode="before")
    @classmethod
    def _score_or_none(cls, v: Any) -> float | None:
        # Review stars are informational only; anything off-scale is dropped.
        score = _coerce_score(v)
        if score is None or not 0 <= score <= 5:
            return None
        return score

    @field_validator("text", mode="before")
    @classmethod
    def _text_or_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class NormalizedAppRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    # identity
    title: str = Field(..., min_length=1)
    developer: str
    url: str
    store: StoreKind
    developer_id: str | None = None
    version: str | None = None

    # reputation signals
    score: float | None = Field(None, ge=0.0, le=5.0)
    ratings_count: int | None = Field(None, ge=0)
    reviews_count: int | None = Field(None, ge=0)
    min_installs: int | None = Field(None, ge=0)
    max_installs: int | None = Field(None, ge=0)
    installs_label: str | None = None

    # commerce
    price: float = Field(0, ge=0)
    is_free: bool = True
    has_ads: bool | None = None
    offers_iap: bool | None = None

    # content
    description: str | None = None
    summary: str | None = None
    genre: str | None = None

    # trust
    privacy_policy_url: str | None = None
    developer_website: str | None = None
    developer_email: str | None = None
    content_rating: str | None = None

    # temporal
    released_at: datetime | None = None
    last_updated_at: datetime | None = None

    # developer reputation (only when the caller could look it up)
    developer_app_count: int | None = Field(None, ge=0)
    developer_account_age_days: int | None = None

    reviews: tuple[ReviewSample, ...] = ()

    # media (not used by any rule)
    icon_url: str | None = None
    screenshot_urls: tuple[str, ...] = ()

    @field_validator("score", mode="before")
    @classmethod
    def _score_or_none(cls, v: Any) -> Any:
        return _coerce_score(v)

    @field_validator("released_at", "last_updated_at", mode="before")
    @classmethod
    def _date_or_none(cls, v: Any) -> datetime | None:
        return _coerce_datetime(v)

    @field_validator("reviews", mode="before")
    @classmethod
    def _cap_reviews(cls, v: Any) -> Any:
        if v is None:
            return ()
        if isinstance(v, (list, tuple)):
            return tuple(v[:MAX_REVIEW_SAMPLE])
        return v


class RiskFlag(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    description: str
    severity: Severity
    points: int = Field(..., gt=0)


class AnalysisResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    app_info: NormalizedAppRecord
    risk_score: int = Field(..., ge=0, le=100)
    risk_level: RiskLevel
    flags: tuple[RiskFlag, ...]
    recommendation: str
    analyzed_at: str


class BatchAnalyzeRequest(BaseModel):
    records: list[NormalizedAppRecord]
    # Same default as the bulk keyword scan; the server clamps it to the allowed range.
    limit: int = 20


class BatchAnalyzeResponse(BaseModel):
    results: list[AnalysisResult]
