from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable

from .models import AnalysisResult, NormalizedAppRecord, RiskFlag, RiskLevel
from .rules import RULES, Rule

logger = logging.getLogger(__name__)

MAX_RISK_SCORE = 100

_SEVERITY_ORDER = {"critical": 0, "high": 1, "medium": 2, "low": 3}

_RECOMMENDATIONS: dict[str, str] = {
    "safe": (
        "This app appears legitimate based on our analysis. It passed most of our security checks "
        "and shows signs of being a well-maintained application. You can proceed with installation with confidence."
    ),
    "low": (
        "This app has a few minor concerns but is likely safe. We recommend reviewing the flagged items "
        "below before installing. Overall, the app appears to be legitimate."
    ),
    "medium": (
        "This app has raised several concerns during our analysis. We recommend proceeding with caution. "
        "Review the detailed flags below carefully and consider if you really need this app before installing."
    ),
    "high": (
        "This app shows strong indicators of being potentially fraudulent or unsafe. We strongly recommend "
        "NOT installing this app. The multiple red flags suggest it may be a scam, contain malware, "
        "or misrepresent its functionality."
    ),
    "critical": (
        "⚠️ This app is almost certainly fake or malicious. DO NOT install this app. It has failed nearly "
        "all of our security checks and shows overwhelming signs of fraud. Report this app to the store if possible."
    ),
}


def _clamp_score(points: int) -> int:
    return max(0, min(MAX_RISK_SCORE, int(points)))


def risk_level_for(score: int) -> RiskLevel:
    if score <= 20:
        return "safe"
    if score <= 40:
        return "low"
    if score <= 60:
        return "medium"
    if score <= 80:
        return "high"
    return "critical"


def recommendation_for(level: RiskLevel) -> str:
    return _RECOMMENDATIONS[level]


def sort_flags(flags: Iterable[RiskFlag]) -> tuple[RiskFlag, ...]:
    """Critical first, then high, medium, low. Ties keep their input order."""
    return tuple(sorted(flags, key=lambda f: _SEVERITY_ORDER[f.severity]))


def _evaluation_instant(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def run_rules(
    record: NormalizedAppRecord,
    now: datetime,
    rules: Iterable[Rule] = RULES,
) -> list[RiskFlag]:
    flags: list[RiskFlag] = []
    for rule in rules:
        flag = rule(record, now)
        if flag is not None:
            logger.debug("rule %s fired: %s (+%d)", rule.__name__, flag.id, flag.points)
            flags.append(flag)
    return flags


def analyze(record: NormalizedAppRecord, now: datetime | None = None) -> AnalysisResult:
    """Score one app record.

    ``now`` is the evaluation instant used for every age-based rule and for
    ``analyzed_at``; it defaults to the current UTC time.
    """
    instant = _evaluation_instant(now)
    flags = run_rules(record, instant)

    # No dedup: overlapping rules each contribute their full weight.
    total_points = sum(f.points for f in flags)
    risk_score = _clamp_score(total_points)
    risk_level = risk_level_for(risk_score)

    logger.debug(
        "analyzed %r: %d flag(s), %d points, score=%d level=%s",
        record.title, len(flags), total_points, risk_score, risk_level,
    )

    return AnalysisResult(
        app_info=record,
        risk_score=risk_score,
        risk_level=risk_level,
        flags=sort_flags(flags),
        recommendation=recommendation_for(risk_level),
        analyzed_at=instant.isoformat(),
    )


def analyze_many(
    records: Iterable[NormalizedAppRecord],
    now: datetime | None = None,
    limit: int | None = None,
) -> list[AnalysisResult]:
    """Analyze several records independently, riskiest first.

    ``limit`` caps how many records are taken from the input. All records share
    one evaluation instant so that the ordering is reproducible.
    """
    instant = _evaluation_instant(now)
    items = list(records)
    if limit is not None:
        items = items[: max(0, limit)]

    results = [analyze(r, instant) for r in items]
    results.sort(key=lambda r: r.risk_score, reverse=True)
    return results
