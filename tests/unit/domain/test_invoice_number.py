"""Unit tests for invoice number templates"""

import pytest
from datetime import date
from src.domain.invoice_number import InvoiceNumbering, format_invoice_number

TODAY = date(2024, 3, 5)


@pytest.mark.parametrize(
    "template, expected",
    [
        ("%YYYY%-%04C%", "2024-0042"),
        ("%YY%%C%", "2442"),
        ("RE-%C%", "RE-42"),
        ("%CN%/%YYYY%/%06C%", "K100/2024/000042"),
        ("%02C%", "42"),
        ("%4C%", "42"),
        ("fixed", "fixed"),
    ],
)
def test_format_invoice_number(template, expected):
    assert format_invoice_number(template, "K100", 42, TODAY) == expected


def test_every_counter_placeholder_is_replaced():
    assert format_invoice_number("%C%-%03C%", "", 7, TODAY) == "7-007"


def test_missing_customer_number_renders_empty():
    assert format_invoice_number("%CN%-%C%", "", 1, TODAY) == "-1"


class TestInvoiceNumbering:

    def test_owner_wide_counter_by_default(self):
        assert InvoiceNumbering().counter_scope(12) is None

    def test_local_counter_per_company(self):
        assert InvoiceNumbering(use_local_counter=True).counter_scope(12) == 12

    def test_default_template(self):
        assert InvoiceNumbering().format(1, TODAY) == "2024-0001"
