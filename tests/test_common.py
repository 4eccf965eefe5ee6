from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from src.fieldops.fieldops.common.datetime_utils import day_bucket, parse_iso_date
from src.fieldops.fieldops.common.pagination import Page, offset_for
from src.fieldops.fieldops.common.validators import require_amount, require_page
from src.fieldops.fieldops.core.exceptions import ValidationError
from src.fieldops.fieldops.notifications.service import unique_emails


def test_day_bucket():
    assert day_bucket(datetime(2026, 5, 1, 23, 59, 59)) == date(2026, 5, 1)
    assert day_bucket(date(2026, 5, 1)) == date(2026, 5, 1)


def test_parse_iso_date():
    assert parse_iso_date("2026-02-28") == date(2026, 2, 28)
    with pytest.raises(ValueError):
        parse_iso_date("28/02/2026")


def test_require_page_caps_limit():
    assert require_page("2", "500") == (2, 100)
    with pytest.raises(ValidationError):
        require_page(1, 0)
    with pytest.raises(ValidationError):
        require_page("x", 10)


def test_require_amount():
    assert require_amount("12.50", "Amount") == Decimal("12.50")
    assert require_amount(0, "Amount") == Decimal("0")
    for bad in (None, True, "NaN", "-0.01"):
        with pytest.raises(ValidationError):
            require_amount(bad, "Amount")


def test_page_meta_for_empty_result():
    page = Page(items=[], total=0, page=1, limit=10)
    assert page.total_pages == 0
    assert not page.has_next_page
    assert not page.has_previous_page
    assert offset_for(3, 10) == 20


def test_unique_emails_keeps_order_and_drops_blanks():
    assert unique_emails(["a@x.io", None, " ", "b@x.io", "a@x.io"]) == ["a@x.io", "b@x.io"]
