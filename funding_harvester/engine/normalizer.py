"""Map raw candidates onto the canonical opportunity schema."""

from __future__ import annotations

import re
from typing import Any, Iterable
from urllib.parse import urljoin, urlparse

from ..config import CompositeField, CompositePart, FieldMapping, SourceConfig
from ..errors import ValidationFailure
from ..models import CanonicalOpportunity
from .dates import parse_deadline
from .extraction.base import RawCandidate

NAME_MIN_LENGTH = 5
NAME_MAX_LENGTH = 600
CATEGORY_MAX_LENGTH = 255
DESCRIPTION_MAX_LENGTH = 2000
TARGET_AUDIENCE_MAX_LENGTH = 1000
PUBLIC_INFO_MAX_LENGTH = 1000

_WS_RE = re.compile(r"\s+")


class FieldNormalizer:
    """Turn a :class:`RawCandidate` into a validated :class:`CanonicalOpportunity`.

    Raises :class:`ValidationFailure` when the name is shorter than five
    characters after trimming/truncation, or when the URL is not absolute
    http(s) after resolving it against the source's base URL. Every other
    field degrades to ``None`` instead of failing.
    """

    def normalize(self, candidate: RawCandidate, source: SourceConfig) -> CanonicalOpportunity:
        mapping = source.mapping
        name = self.normalize_name(self._first_value(candidate, mapping.name))
        url = self.normalize_url(self._raw_url(candidate, mapping), source.base_url)
        deadline = parse_deadline(self._first_value(candidate, mapping.deadline))
        return CanonicalOpportunity(
            site=source.name,
            name=name,
            url=url,
            deadline=deadline,
            locale=source.locale,
            category=self.compose(candidate, mapping.category, CATEGORY_MAX_LENGTH),
            description=self.compose(candidate, mapping.description, DESCRIPTION_MAX_LENGTH),
            target_audience=self.compose(
                candidate, mapping.target_audience, TARGET_AUDIENCE_MAX_LENGTH
            ),
            public_info=self.compose(candidate, mapping.public_info, PUBLIC_INFO_MAX_LENGTH),
        )

    # ------------------------------------------------------------------
    @staticmethod
    def normalize_name(value: Any) -> str:
        text = _WS_RE.sub(" ", "" if value is None else str(value)).strip()
        text = text[:NAME_MAX_LENGTH].strip()
        if len(text) < NAME_MIN_LENGTH:
            raise ValidationFailure("invalid_name", text)
        return text

    @staticmethod
    def normalize_url(value: Any, base_url: str) -> str:
        raw = "" if value is None else str(value).strip()
        if not raw:
            raise ValidationFailure("invalid_url", raw)
        try:
            if not urlparse(raw).scheme:
                raw = urljoin(base_url, raw)
            parsed = urlparse(raw)
        except ValueError as exc:
            raise ValidationFailure("invalid_url", raw) from exc
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValidationFailure("invalid_url", raw)
        return raw

    def compose(
        self,
        candidate: RawCandidate,
        composite: CompositeField | None,
        max_length: int,
    ) -> str | None:
        """Join every available part, labelled as ``**Label:** value``."""

        if composite is None:
            return None
        pieces: list[str] = []
        for part in composite.parts:
            text = self._render_part(candidate.get(part.path), part)
            if not text:
                continue
            text = f"{part.prefix}{text}"
            if part.label:
                text = f"**{part.label}:** {text}"
            pieces.append(text)
        if not pieces:
            return None
        return composite.separator.join(pieces)[:max_length].strip() or None

    # ------------------------------------------------------------------
    @staticmethod
    def _render_part(value: Any, part: CompositePart) -> str:
        if value is None or isinstance(value, dict):
            return ""
        if isinstance(value, list):
            items = [str(item).strip() for item in value if item is not None and not isinstance(item, (dict, list))]
            items = [item for item in items if item]
            if part.limit is not None:
                items = items[: part.limit]
            return part.join.join(items)
        return str(value).strip()

    @staticmethod
    def _first_value(candidate: RawCandidate, paths: Iterable[str]) -> Any:
        for path in paths:
            value = candidate.get(path)
            if value is None:
                continue
            if isinstance(value, str) and not value.strip():
                continue
            return value
        return None

    def _raw_url(self, candidate: RawCandidate, mapping: FieldMapping) -> Any:
        if mapping.url_template:
            try:
                return mapping.url_template.format_map(candidate.data)
            except (KeyError, IndexError, ValueError, AttributeError):
                return None
        return self._first_value(candidate, mapping.url)


__all__ = [
    "CATEGORY_MAX_LENGTH",
    "DESCRIPTION_MAX_LENGTH",
    "FieldNormalizer",
    "NAME_MAX_LENGTH",
    "NAME_MIN_LENGTH",
    "PUBLIC_INFO_MAX_LENGTH",
    "TARGET_AUDIENCE_MAX_LENGTH",
]
