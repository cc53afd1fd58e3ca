from __future__ import annotations

import re

# All matching is case-insensitive substring matching against lower-cased text.

SUSPICIOUS_KEYWORDS = (
    "free hack",
    "mod apk",
    "unlimited coins",
    "unlimited gems",
    "free robux",
    "generator",
    "cheat",
    "cracked",
    "premium free",
    "pro free",
    "paid free",
    "free diamonds",
    "unlimited money",
    "get free",
    "no root",
    "free fire hack",
)

SUSPICIOUS_DEV_KEYWORDS = (
    "hack",
    "mod",
    "generator",
    "official",
    "free",
    "studio",
    "inc",
    "team",
)

IMPERSONATION_TARGETS = (
    "whatsapp",
    "instagram",
    "telegram",
    "youtube",
    "facebook",
    "snapchat",
    "spotify",
    "netflix",
    "amazon",
    "google",
)

# No "free" here: too common in honest titles.
DANGEROUS_MODIFIERS = ("hack", "mod", "cracked", "unlocked")

# (brand as it appears in titles, substring expected in the real developer name)
TRUSTED_BRANDS = (
    ("whatsapp", "whatsapp"),
    ("google pay", "google"),
    ("gpay", "google"),
    ("paytm", "paytm"),
    ("phonepe", "phonepe"),
    ("amazon", "amazon"),
    ("facebook", "meta"),
    ("instagram", "meta"),
    ("telegram", "telegram"),
    ("spotify", "spotify"),
    ("netflix", "netflix"),
)

IMPERSONATION_KEYWORDS = (
    "plus",
    "pro",
    "premium",
    "mod",
    "hack",
    "free",
    "unlocked",
)

# Utility/fan apps that mention a brand without pretending to be it.
LEGITIMATE_COMPANION_KEYWORDS = (
    "saver",
    "downloader",
    "download",
    "repost",
    "sticker",
    "stickers",
    "theme",
    "themes",
    "wallpaper",
    "wallpapers",
    "guide",
    "tutorial",
    "tips",
    "cleaner",
    "backup",
    "recovery",
    "tracker",
    "status",
    "widget",
    "fonts",
    "keyboard",
    "scanner",
    "reader",
    "manager",
    "companion",
    "helper",
    "tool",
    "tools",
    "analytics",
    "insights",
    "viewer",
    "editor",
    "maker",
    "creator",
    "converter",
    "splitter",
    "scheduler",
    "reminder",
    "notifier",
    "chat",
    "dual",
    "clone",
    "web",
    "lite",
    "for business",
    "business",
    "trading",
    "trade",
    "invest",
    "pay",
    "money",
    "send",
    "transfer",
)

LOAN_FRAUD_KEYWORDS = (
    "instant loan",
    "quick loan",
    "cash loan",
    "loan fast",
    "loan in minutes",
    "loan without pan",
    "loan without documents",
    "personal loan fast",
    "get loan instantly",
    "easy loan",
    "loan app",
    "money loan fast",
)

FRAUD_REVIEW_KEYWORDS = (
    "scam",
    "fraud",
    "blackmail",
    "stole my data",
    "hacked",
    "fake app",
    "threat",
    "abuse",
    "harassment",
)

CLONE_PATTERNS = (
    re.compile(r"\b(for|of)\s+(fortnite|minecraft|roblox|gta|among\s?us)", re.IGNORECASE),
    re.compile(r"\bguide\s+(for|to)\b", re.IGNORECASE),
    re.compile(r"\bwallpaper(s)?\s+(for|hd)\b", re.IGNORECASE),
    re.compile(r"\bskin(s)?\s+(for|free)\b", re.IGNORECASE),
)


def find_keywords(text: str | None, keywords: tuple[str, ...]) -> list[str]:
    """Return the keywords found in ``text``, in table order."""
    if not text:
        return []
    lowered = text.lower()
    return [kw for kw in keywords if kw in lowered]


def contains_any(text: str | None, keywords: tuple[str, ...]) -> bool:
    return bool(find_keywords(text, keywords))
