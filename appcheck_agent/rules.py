from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Callable

from .keywords import (
    CLONE_PATTERNS,
    DANGEROUS_MODIFIERS,
    FRAUD_REVIEW_KEYWORDS,
    IMPERSONATION_KEYWORDS,
    IMPERSONATION_TARGETS,
    LEGITIMATE_COMPANION_KEYWORDS,
    LOAN_FRAUD_KEYWORDS,
    SUSPICIOUS_DEV_KEYWORDS,
    SUSPICIOUS_KEYWORDS,
    TRUSTED_BRANDS,
    contains_any,
    find_keywords,
)
from .models import NormalizedAppRecord, RiskFlag

Rule = Callable[[NormalizedAppRecord, datetime], "RiskFlag | None"]

# Apps with this many installs have been vetted by the store and its users.
_ESTABLISHED_INSTALLS = 100_000


def _as_utc(moment: datetime) -> datetime:
    return moment.replace(tzinfo=timezone.utc) if moment.tzinfo is None else moment


def _days_since(moment: datetime, now: datetime) -> int:
    # Naive instants are read as UTC, same as the record dates.
    moment, now = _as_utc(moment), _as_utc(now)
    return math.floor((now - moment).total_seconds() / 86400)


def _installs_text(app: NormalizedAppRecord) -> str:
    if app.installs_label:
        return app.installs_label
    return f"{app.min_installs or 0:,}"


def _quoted(items: list[str]) -> str:
    return '"' + '", "'.join(items) + '"'


def _is_companion(title_lower: str) -> bool:
    return contains_any(title_lower, LEGITIMATE_COMPANION_KEYWORDS)


def _is_established(app: NormalizedAppRecord) -> bool:
    return app.min_installs is not None and app.min_installs >= _ESTABLISHED_INSTALLS


def check_low_rating(app: NormalizedAppRecord, now: datetime) -> RiskFlag | None:
    if app.score is None or app.score >= 3.0:
        return None
    very_low = app.score < 2.0
    return RiskFlag(
        id="low_rating",
        label="Very Low Rating",
        description=(
            f"The app has a rating of {app.score:.1f}/5.0, which is significantly below average. "
            "Legitimate apps typically maintain ratings above 3.5."
        ),
        severity="high" if very_low else "medium",
        points=20 if very_low else 15,
    )


def check_few_ratings(app: NormalizedAppRecord, now: datetime) -> RiskFlag | None:
    if app.store != "google" or not app.min_installs or app.ratings_count is None:
        return None
    # Ratings rather than reviews: the review count is often capped by the store.
    ratio = app.ratings_count / app.min_installs
    if app.min_installs > 10000 and ratio < 0.01:
        return RiskFlag(
            id="few_ratings",
            label="Suspiciously Few Ratings",
            description=(
                f"With {_installs_text(app)} installs but only {app.ratings_count:,} ratings, "
                "the engagement ratio is unusually low (<1%). "
                "This may indicate fake or incentivized installs."
            ),
            severity="medium",
            points=10,
        )
    return None


def check_very_few_ratings(app: NormalizedAppRecord, now: datetime) -> RiskFlag | None:
    if app.score is None or app.ratings_count is None or app.ratings_count >= 10:
        return None
    return RiskFlag(
        id="very_few_ratings",
        label="Very Few Ratings",
        description=(
            f"The app has only {app.ratings_count} ratings, making it difficult to assess its actual quality. "
            "Be cautious with apps that have very few user reviews."
        ),
        severity="low",
        points=5,
    )


def check_very_low_installs(app: NormalizedAppRecord, now: datetime) -> RiskFlag | None:
    if app.min_installs is None or app.min_installs >= 1000:
        return None
    return RiskFlag(
        id="very_low_installs",
        label="Very Low Install Count",
        description=(
            f"This app has fewer than 1,000 installs ({app.min_installs:,}). "
            "Apps with extremely low install counts are harder to vet and carry higher risk, "
            "as they lack community validation."
        ),
        severity="medium",
        points=10,
    )


def check_fake_high_rating(app: NormalizedAppRecord, now: datetime) -> RiskFlag | None:
    if app.score is None or app.ratings_count is None:
        return None
    if app.score >= 4.8 and app.ratings_count < 50:
        return RiskFlag(
            id="fake_high_rating",
            label="Suspiciously High Rating with Few Ratings",
            description=(
                f"This app has a near-perfect rating of {app.score:.1f} but only {app.ratings_count} ratings. "
                "Legitimate apps with very few ratings rarely maintain scores above 4.8, "
                "so this is a strong indicator of rating manipulation."
            ),
            severity="high",
            points=15,
        )
    return None


def check_fake_install_inflation(app: NormalizedAppRecord, now: datetime) -> RiskFlag | None:
    if app.min_installs is None or app.ratings_count is None:
        return None
    if app.min_installs >= 100_000 and app.ratings_count < 100:
        return RiskFlag(
            id="fake_install_inflation",
            label="Extremely Low Ratings for High Installs",
            description=(
                f"This app claims {_installs_text(app)} installs but has only {app.ratings_count} ratings. "
                "For an app with 100K+ installs this level of engagement is virtually impossible organically, "
                "which strongly suggests artificial install inflation."
            ),
            severity="high",
            points=15,
        )
    return None


def check_rating_manipulation(app: NormalizedAppRecord, now: datetime) -> RiskFlag | None:
    if app.score is None or app.ratings_count is None:
        return None

    ratings = app.ratings_count
    near_perfect = app.score >= 4.8 and ratings < 50
    inflated = app.min_installs is not None and app.min_installs >= 100_000 and ratings < 100
    heavily_inflated = app.min_installs is not None and app.min_installs >= 1_000_000 and ratings < 500

    reasons: list[str] = []
    if near_perfect:
        reasons.append(f"near-perfect rating ({app.score:.1f}) with only {ratings} ratings")
    if inflated:
        reasons.append(f"100K+ installs but only {ratings} ratings")
    if heavily_inflated:
        reasons.append(f"1M+ installs but only {ratings} ratings")
    if not reasons:
        return None

    return RiskFlag(
        id="rating_manipulation",
        label="Rating Manipulation Suspected",
        description=(
            f"Multiple signals indicate potential rating manipulation: {'; '.join(reasons)}. "
            "These patterns are statistically improbable for organic growth and suggest artificial inflation."
        ),
        severity="high",
        points=20,
    )


def check_very_new(app: NormalizedAppRecord, now: datetime) -> RiskFlag | None:
    if app.released_at is None:
        return None
    days = _days_since(app.released_at, now)
    if days < 30:
        return RiskFlag(
            id="very_new",
            label="Very New App",
            description=(
                f"This app was released only {days} days ago. "
                "Very new apps with bold claims should be treated with extra caution "
                "as they haven't been vetted by time."
            ),
            severity="medium",
            points=10,
        )
    return None


def check_not_updated_recently(app: NormalizedAppRecord, now: datetime) -> RiskFlag | None:
    if app.last_updated_at is None:
        return None
    days = _days_since(app.last_updated_at, now)
    if days > 365:
        return RiskFlag(
            id="not_updated_recently",
            label="App Not Updated Recently",
            description=(
                f"This app hasn't been updated in over {days // 30} months "
                f"(last update: {app.last_updated_at.date().isoformat()}). "
                "Abandoned apps may have unpatched security vulnerabilities "
                "and are more likely to be low-effort scams."
            ),
            severity="medium",
            points=10,
        )
    return None


def check_update_frequency(app: NormalizedAppRecord, now: datetime) -> RiskFlag | None:
    """Age-banded update check: over two years is severe, one to two years is a warning.

    Overlaps with check_not_updated_recently; both contribute points.
    """
    if app.last_updated_at is None:
        return None
    days = _days_since(app.last_updated_at, now)
    last_update = app.last_updated_at.date().isoformat()

    if days > 730:
        return RiskFlag(
            id="severely_outdated",
            label="App Severely Outdated",
            description=(
                f"This app hasn't been updated in over {days // 365} years (last update: {last_update}). "
                "Severely outdated apps are prime targets for security exploits "
                "and are very likely abandoned or fraudulent."
            ),
            severity="high",
            points=20,
        )
    if days > 365:
        return RiskFlag(
            id="outdated_app",
            label="App Not Updated in Over a Year",
            description=(
                f"This app hasn't been updated in over {days // 30} months (last update: {last_update}). "
                "Apps that go long periods without updates may have unpatched vulnerabilities "
                "and reduced reliability."
            ),
            severity="medium",
            points=15,
        )
    return None


def check_no_dev_website(app: NormalizedAppRecord, now: datetime) -> RiskFlag | None:
    if app.store != "google" or app.developer_website:
        return None
    return RiskFlag(
        id="no_dev_website",
        label="No Developer Website",
        description=(
            "The developer hasn't provided a website. Established and trustworthy developers "
            "typically have an online presence with a verifiable website."
        ),
        severity="medium",
        points=10,
    )


def check_no_privacy_policy(app: NormalizedAppRecord, now: datetime) -> RiskFlag | None:
    # The App Store listing doesn't expose a privacy policy URL.
    if app.store == "apple" or app.privacy_policy_url:
        return None
    return RiskFlag(
        id="no_privacy_policy",
        label="No Privacy Policy",
        description=(
            "This app doesn't link to a privacy policy. Google requires apps to have a privacy policy. "
            "Its absence is a significant red flag for data handling practices."
        ),
        severity="high",
        points=15,
    )


def check_no_dev_email(app: NormalizedAppRecord, now: datetime) -> RiskFlag | None:
    if app.store != "google" or app.developer_email:
        return None
    return RiskFlag(
        id="no_dev_email",
        label="No Developer Contact Email",
        description=(
            "The developer hasn't provided a contact email. "
            "This makes it difficult to reach them for support or report issues."
        ),
        severity="low",
        points=5,
    )


def check_suspicious_developer(app: NormalizedAppRecord, now: datetime) -> RiskFlag | None:
    found = find_keywords(app.developer, SUSPICIOUS_DEV_KEYWORDS)
    if not found:
        return None
    return RiskFlag(
        id="suspicious_developer",
        label="Suspicious Developer Name",
        description=(
            f'The developer name "{app.developer}" contains suspicious keywords: {_quoted(found)}. '
            "Scam developers often use generic or misleading names to appear legitimate."
        ),
        severity="high",
        points=15,
    )


def check_developer_reputation(app: NormalizedAppRecord, now: datetime) -> RiskFlag | None:
    reasons: list[str] = []
    if app.developer_app_count is not None and app.developer_app_count <= 2:
        reasons.append(f"developer has only {app.developer_app_count} app(s) published")
    if app.developer_account_age_days is not None and app.developer_account_age_days < 30:
        reasons.append(f"developer account is only {app.developer_account_age_days} days old")
    if not reasons:
        return None
    return RiskFlag(
        id="low_dev_reputation",
        label="Low Developer Reputation",
        description=(
            f"This developer shows signs of low credibility: {'; '.join(reasons)}. "
            "Scam developers often create throwaway accounts with minimal publishing history "
            "to distribute fraudulent apps."
        ),
        severity="high",
        points=20,
    )


def check_short_description(app: NormalizedAppRecord, now: datetime) -> RiskFlag | None:
    length = len(app.description or "")
    if length >= 100:
        return None
    return RiskFlag(
        id="short_description",
        label="Generic/Short Description",
        description=(
            f"The app description is unusually short ({length} characters). "
            "Legitimate apps typically have detailed descriptions explaining their features and functionality."
        ),
        severity="medium",
        points=10,
    )


def check_suspicious_title(app: NormalizedAppRecord, now: datetime) -> RiskFlag | None:
    found = find_keywords(app.title, SUSPICIOUS_KEYWORDS)
    if not found:
        return None
    return RiskFlag(
        id="suspicious_title",
        label="Suspicious Keywords in Title",
        description=(
            f"The app title contains suspicious keywords: {_quoted(found)}. "
            "Apps using these terms are often fraudulent or distribute malicious content."
        ),
        severity="high",
        points=15,
    )


def check_suspicious_description(app: NormalizedAppRecord, now: datetime) -> RiskFlag | None:
    found = find_keywords(app.description, SUSPICIOUS_KEYWORDS)
    if len(found) < 2:
        return None
    return RiskFlag(
        id="suspicious_description",
        label="Suspicious Claims in Description",
        description=(
            f"The description contains multiple suspicious keywords: {_quoted(found[:3])}. "
            "These claims are typically associated with fraudulent apps."
        ),
        severity="high",
        points=10,
    )


def check_aggressive_monetization(app: NormalizedAppRecord, now: datetime) -> RiskFlag | None:
    if not (app.is_free and app.has_ads and app.offers_iap):
        return None
    return RiskFlag(
        id="aggressive_monetization",
        label="Aggressive Monetization",
        description=(
            "This free app is both ad-supported AND offers in-app purchases. "
            "While not inherently malicious, this aggressive monetization pattern "
            "is common among low-quality or scam apps."
        ),
        severity="low",
        points=5,
    )


def check_clone_indicator(app: NormalizedAppRecord, now: datetime) -> RiskFlag | None:
    title_lower = app.title.lower()
    if not any(p.search(title_lower) for p in CLONE_PATTERNS):
        return None
    return RiskFlag(
        id="clone_indicator",
        label="Potential Clone/Copycat App",
        description=(
            "The app title suggests it may be a copycat or unofficial companion app for a popular game/service. "
            "These apps often contain ads, malware, or simply don't work as promised."
        ),
        severity="high",
        points=15,
    )


def check_loan_fraud(app: NormalizedAppRecord, now: datetime) -> RiskFlag | None:
    found = find_keywords(f"{app.title} {app.description or ''}", LOAN_FRAUD_KEYWORDS)

    if len(found) >= 3:
        return RiskFlag(
            id="loan_fraud_critical",
            label="High-Risk Loan Scam Pattern",
            description=(
                f"This app contains {len(found)} loan fraud keywords: {_quoted(found[:4])}. "
                "Financial loan scam apps frequently use these terms to lure victims with promises "
                "of instant cash, then harvest personal data or charge hidden fees."
            ),
            severity="critical",
            points=35,
        )
    if found:
        return RiskFlag(
            id="loan_fraud_warning",
            label="Potential Loan Scam Keywords",
            description=(
                f"This app contains loan-related fraud keywords: {_quoted(found)}. "
                "Apps promising instant loans or cash with minimal verification are a major category "
                "of app store fraud, often leading to data theft or hidden charges."
            ),
            severity="critical",
            points=25,
        )
    return None


def check_fraud_reviews(app: NormalizedAppRecord, now: datetime) -> RiskFlag | None:
    texts = [r.text for r in app.reviews]
    if not texts:
        return None
    flagged = [t for t in texts if contains_any(t, FRAUD_REVIEW_KEYWORDS)]
    if len(flagged) < 2:
        return None
    return RiskFlag(
        id="fraud_reviews_detected",
        label="Users Report Fraud or Abuse",
        description=(
            f"{len(flagged)} out of {len(texts)} sampled reviews contain fraud-related keywords "
            "(scam, fraud, harassment, etc.). When multiple users independently report similar issues, "
            "it is a strong indicator of a deceptive or dangerous app."
        ),
        severity="critical",
        points=40,
    )


def check_impersonation(app: NormalizedAppRecord, now: datetime) -> RiskFlag | None:
    title_lower = app.title.lower()
    brand = next((b for b in IMPERSONATION_TARGETS if b in title_lower), None)
    if brand is None or _is_companion(title_lower) or _is_established(app):
        return None
    if not contains_any(title_lower, DANGEROUS_MODIFIERS):
        return None
    return RiskFlag(
        id="impersonation",
        label="Potential Brand Impersonation",
        description=(
            f'This app\'s title references "{brand}" combined with suspicious modifiers. '
            "This is a common pattern used by fraudulent apps to impersonate well-known brands "
            "and trick users into downloading malware or adware."
        ),
        severity="critical",
        points=20,
    )


def check_brand_impersonation(app: NormalizedAppRecord, now: datetime) -> RiskFlag | None:
    title_lower = app.title.lower()
    dev_lower = app.developer.lower()
    if _is_companion(title_lower) or _is_established(app):
        return None
    if not contains_any(title_lower, IMPERSONATION_KEYWORDS):
        return None

    for brand, expected_developer in TRUSTED_BRANDS:
        if brand not in title_lower or expected_developer in dev_lower:
            continue
        return RiskFlag(
            id="brand_impersonation",
            label="Brand Impersonation Detected",
            description=(
                f'This app references the trusted brand "{brand}" but the developer ("{app.developer}") '
                f'does not match the expected developer "{expected_developer}", and the title contains '
                "suspicious keywords. This is a common tactic used to steal user credentials and distribute malware."
            ),
            severity="critical",
            points=25,
        )
    return None


RULES: tuple[Rule, ...] = (
    check_low_rating,
    check_few_ratings,
    check_very_few_ratings,
    check_very_new,
    check_no_dev_website,
    check_short_description,
    check_no_privacy_policy,
    check_suspicious_title,
    check_suspicious_description,
    check_aggressive_monetization,
    check_no_dev_email,
    check_clone_indicator,
    check_very_low_installs,
    check_fake_high_rating,
    check_suspicious_developer,
    check_not_updated_recently,
    check_fake_install_inflation,
    check_impersonation,
    check_brand_impersonation,
    check_rating_manipulation,
    check_loan_fraud,
    check_developer_reputation,
    check_fraud_reviews,
    check_update_frequency,
)
