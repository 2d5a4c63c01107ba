from __future__ import annotations

import pytest

from funding_harvester.engine.dates import parse_deadline


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("25/12/2025", "2025-12-25"),
        ("2025-12-25", "2025-12-25"),
        ("25 de dez. de 2025", "2025-12-25"),
        ("5 de março de 2026", "2026-03-05"),
        ("2025-12-25T23:59:59Z", "2025-12-25"),
        ("Inscrições até 01/03/2026", "2026-03-01"),
        ("not a date", None),
        ("31/02/2025", None),
        ("2025-13-01", None),
        ("10 de foo. de 2025", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_deadline(raw, expected) -> None:
    assert parse_deadline(raw) == expected
