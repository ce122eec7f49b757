"""Utilities for safe structured logging fields."""

from __future__ import annotations

import hashlib
from typing import Any


def safe_log_identifier(value: Any, *, prefix: str) -> str:
    """Return a deterministic non-reversible token for log correlation fields."""
    text = str(value or "").strip()
    if not text:
        return f"{prefix}-missing"

    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()[:12]
    return f"{prefix}-{digest}"


def safe_log_email(email: Any) -> str:
    """Digest an email address, keeping only the domain readable for triage."""
    text = str(email or "").strip().lower()
    _, _, domain = text.rpartition("@")
    if not domain or domain == text:
        return safe_log_identifier(text, prefix="email")
    return f"{safe_log_identifier(text, prefix='email')}@{domain}"
