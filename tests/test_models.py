"""
Tests for record validation and the graceful handling of malformed optional fields.
"""

from datetime import date, datetime, timezone

import pytest
from pydantic import ValidationError

from appcheck_agent.analyzer import analyze
from appcheck_agent.models import MAX_REVIEW_SAMPLE, NormalizedAppRecord


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2024-03-05", datetime(2024, 3, 5, tzinfo=timezone.utc)),
        ("2024-03-05T10:00:00Z", datetime(2024, 3, 5, 10, tzinfo=timezone.utc)),
        ("Mar 5, 2024", datetime(2024, 3, 5, tzinfo=timezone.utc)),
        (date(2024, 3, 5), datetime(2024, 3, 5, tzinfo=timezone.utc)),
        (1709632800000, datetime(2024, 3, 5, 10, tzinfo=timezone.utc)),
    ],
)
def test_dates_are_parsed_from_storefront_formats(make_record, raw, expected):
    record = make_record(last_updated_at=raw)
    assert record.last_updated_at == expected


@pytest.mark.parametrize("raw", ["", "yesterday", "2024-13-45", [], True, 10**20, 0, -5])
def test_unparseable_dates_become_absent(make_record, raw):
    assert make_record(released_at=raw).released_at is None


def test_naive_datetime_is_utc(make_record):
    record = make_record(released_at=datetime(2020, 1, 1, 8, 30))
    assert record.released_at.tzinfo is not None
    assert record.released_at.utcoffset().total_seconds() == 0


@pytest.mark.parametrize("raw", ["n/a", "", None, "nan", True])
def test_non_numeric_score_is_absent(make_record, raw):
    assert make_record(score=raw).score is None


def test_numeric_string_score_is_accepted(make_record):
    assert make_record(score="4.5").score == 4.5


@pytest.mark.parametrize("raw", [5.1, -0.1])
def test_score_out_of_range_is_rejected(make_record, raw):
    with pytest.raises(ValidationError):
        make_record(score=raw)


def test_negative_counts_are_rejected(make_record):
    with pytest.raises(ValidationError):
        make_record(ratings_count=-1)


def test_review_sample_is_capped(make_record):
    reviews = [{"score": 3, "text": f"review {i}"} for i in range(8)]
    record = make_record(reviews=reviews)
    assert len(record.reviews) == MAX_REVIEW_SAMPLE
    assert record.reviews[0].text == "review 0"


def test_reviews_without_a_usable_score_are_kept(make_record, now):
    record = make_record(reviews=[{"score": None, "text": "scam"}, {"score": "n/a", "text": "fraud"}])
    assert [r.score for r in record.reviews] == [None, None]

    flag = next(f for f in analyze(record, now).flags if f.id == "fraud_reviews_detected")
    assert flag.points == 40


@pytest.mark.parametrize("raw", [7, -1, "nan"])
def test_off_scale_review_score_is_dropped(make_record, raw):
    assert make_record(reviews=[{"score": raw, "text": "ok"}]).reviews[0].score is None


def test_review_without_text_is_empty(make_record):
    review = make_record(reviews=[{"score": 1, "text": None}]).reviews[0]
    assert review.text == ""
    assert review.score == 1


def test_zero_update_timestamp_raises_no_update_flags(make_record, now):
    record = make_record(last_updated_at=0)
    assert record.last_updated_at is None
    ids = {f.id for f in analyze(record, now).flags}
    assert not ids & {"not_updated_recently", "outdated_app", "severely_outdated"}


def test_unknown_store_is_rejected(make_record):
    with pytest.raises(ValidationError):
        make_record(store="amazon")


def test_required_identity_fields():
    with pytest.raises(ValidationError):
        NormalizedAppRecord(developer="x", url="https://example.test", store="google")


def test_records_are_immutable(clean_record):
    with pytest.raises(ValidationError):
        clean_record.title = "Something else"


def test_records_compare_by_value(make_record):
    assert make_record() == make_record()
    assert make_record() != make_record(title="Other")
