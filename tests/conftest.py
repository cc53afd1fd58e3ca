"""
Shared fixtures for the app risk engine tests.

Records are built from a "clean" baseline that triggers no rule at all,
so each test only has to override the fields it cares about.
"""

from datetime import datetime, timedelta, timezone

import pytest

from appcheck_agent.models import NormalizedAppRecord


NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)

CLEAN_DESCRIPTION = (
    "Budget Planner helps you track monthly spending, set savings goals and review clear reports. "
    "Categories, recurring bills and exports to CSV are built in. "
    "Sync between devices is optional and your data stays on the phone unless you turn it on. "
    "Charts show where money goes each week, and reminders nudge you before bills are due. "
    "No account is required to get started, and the app works fully offline."
)


def clean_fields(now: datetime) -> dict:
    return {
        "title": "Budget Planner",
        "developer": "Northwind Labs",
        "url": "https://play.google.com/store/apps/details?id=com.northwind.budget",
        "store": "google",
        "score": 4.2,
        "ratings_count": 50_000,
        "reviews_count": 12_000,
        "min_installs": 1_000_000,
        "max_installs": 5_000_000,
        "installs_label": "1,000,000+",
        "price": 0,
        "is_free": True,
        "has_ads": False,
        "offers_iap": True,
        "description": CLEAN_DESCRIPTION,
        "summary": "Simple personal budgeting",
        "genre": "Finance",
        "privacy_policy_url": "https://northwind.example/privacy",
        "developer_website": "https://northwind.example",
        "developer_email": "support@northwind.example",
        "content_rating": "Everyone",
        "released_at": now - timedelta(days=800),
        "last_updated_at": now - timedelta(days=30),
        "reviews": [
            {"score": 5, "text": "Does exactly what I need."},
            {"score": 4, "text": "Nice charts, wish it had dark mode."},
        ],
    }


@pytest.fixture
def now():
    """Fixed evaluation instant so that age-based rules are deterministic."""
    return NOW


@pytest.fixture
def make_record():
    """Build a validated record from the clean baseline plus overrides."""
    def _make(now: datetime = NOW, **overrides) -> NormalizedAppRecord:
        fields = clean_fields(now)
        fields.update(overrides)
        return NormalizedAppRecord(**fields)

    return _make


@pytest.fixture
def clean_record(make_record):
    return make_record()
