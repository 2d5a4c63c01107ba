"""Deterministic identity for opportunities."""

from __future__ import annotations

import hashlib

from ..models import CanonicalOpportunity


def make_fingerprint(site: str, name: str, url: str, deadline: str | None) -> str:
    """SHA-256 hex digest of ``site|trimmed name|url|deadline``."""

    raw = f"{site}|{name.strip()}|{url}|{deadline or ''}"
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def fingerprint_of(opportunity: CanonicalOpportunity) -> str:
    return make_fingerprint(
        opportunity.site, opportunity.name, opportunity.url, opportunity.deadline
    )


__all__ = ["fingerprint_of", "make_fingerprint"]
