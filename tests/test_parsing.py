"""
Unit tests for receipt text parsing and expense extraction.
"""

import logging
import pytest
from datetime import date, datetime
from decimal import Decimal

from receipt_scan.parsing import ReceiptTextParser, extract_expense
from receipt_scan.models import ExpenseDraft


NOW = date(2025, 6, 1)


class TestReceiptTextParser:
    """Test cases for ReceiptTextParser class."""

    @pytest.fixture
    def parser(self):
        """Create ReceiptTextParser instance for testing."""
        return ReceiptTextParser()

    @pytest.fixture
    def sample_receipt_text(self):
        """Sample receipt text for testing extraction."""
        return """
        STARBUCKS COFFEE #12345
        123 Main Street
        Seattle, WA 98101

        Date: 01/15/2024
        Time: 10:30 AM

        1 Grande Latte          4.85
        1 Blueberry Muffin      2.95

        Subtotal:               7.80
        Tax:                    0.85
        Total:                  $8.65

        Thank you for visiting!
        """

    def test_normalize_lines(self, parser):
        """Lines are trimmed, empty lines dropped, order kept."""
        text = "  First  \n\n   \nSecond\r\n\tThird\t"
        assert parser.normalize_lines(text) == ["First", "Second", "Third"]

    def test_normalize_lines_empty(self, parser):
        assert parser.normalize_lines("") == []
        assert parser.normalize_lines("  \n \t \n") == []

    def test_extract_date_formats(self, parser):
        """Test date extraction with various formats."""
        test_cases = [
            ("Purchased 2024/03/07 thanks", "2024-03-07"),
            ("03/07/24 receipt", "2024-03-07"),
            ("Date: 01/15/2024", "2024-01-15"),
            ("1-5-2023 12:00", "2023-01-05"),
            ("2023-1-5", "2023-01-05"),
            ("1999/12/31", "1999-12-31"),
        ]

        for text, expected in test_cases:
            result = parser.extract_date(text, NOW)
            assert result == expected, f"Failed for text: {text}"

    def test_extract_date_first_match_wins(self, parser):
        text = "Printed 02/03/2024\nVisit 2024/05/06"
        assert parser.extract_date(text, NOW) == "2024-02-03"

    def test_extract_date_fallback(self, parser):
        assert parser.extract_date("no date here", NOW) == "2025-06-01"
        assert parser.extract_date("", NOW) == "2025-06-01"

    def test_extract_date_fallback_accepts_datetime(self, parser):
        now = datetime(2024, 12, 31, 23, 59)
        assert parser.extract_date("nothing", now) == "2024-12-31"

    def test_extract_date_passes_through_out_of_range(self, parser):
        """Month and day ranges are not validated."""
        assert parser.extract_date("13/45/2024", NOW) == "2024-13-45"

    def test_extract_date_unparsable_falls_back(self, parser):
        # Year-first shape that does not start with 19/20
        assert parser.extract_date("3024/01/01", NOW) == "2025-06-01"

    def test_extract_date_ignores_non_ascii_digits(self, parser):
        assert parser.extract_date("٠٣/٠٧/٢٤", NOW) == "2025-06-01"
        assert parser.extract_date("٢٠٢٤/٠٣/٠٧", NOW) == "2025-06-01"

    def test_extract_merchant_basic(self, parser):
        lines = ["Joe's Diner", "123 Main St", "Total 9.99"]
        assert parser.extract_merchant(lines) == "Joe's Diner"

    def test_extract_merchant_skips_unqualified_lines(self, parser):
        lines = ["123 Main St", "Hi!", "WALMART SUPERCENTER"]
        assert parser.extract_merchant(lines) == "WALMART SUPERCENTER"

    def test_extract_merchant_fallback(self, parser):
        lines = ["123", "!!", "Receipt Co"]
        assert parser.extract_merchant(lines) == "Unknown Merchant"

    def test_extract_merchant_length_bounds(self, parser):
        assert parser.extract_merchant(["Abc"]) == "Unknown Merchant"
        assert parser.extract_merchant(["Abcd"]) == "Abcd"
        assert parser.extract_merchant(["A" * 49]) == "A" * 49
        assert parser.extract_merchant(["A" * 50]) == "Unknown Merchant"

    def test_extract_merchant_only_first_three_lines(self, parser):
        lines = ["1", "2", "3", "Late Merchant"]
        assert parser.extract_merchant(lines) == "Unknown Merchant"

    def test_extract_merchant_receipt_keyword_case_insensitive(self, parser):
        assert parser.extract_merchant(["SALES RECEIPT", "Corner Shop"]) == "Corner Shop"

    def test_extract_amount_max_selection(self, parser):
        text = "Subtotal 12.50 Tax 1.10 Total 13.60"
        assert parser.extract_amount(text) == "$13.60"

    def test_extract_amount_keywords(self, parser):
        test_cases = [
            ("TOTAL: $25.99", "$25.99"),
            ("Amount 15,50", "$15.50"),
            ("sum:7.25", "$7.25"),
        ]

        for text, expected in test_cases:
            assert parser.extract_amount(text) == expected, f"Failed for text: {text}"

    def test_extract_amount_bare_tokens(self, parser):
        assert parser.extract_amount("Latte 4.85\nMuffin 2.95") == "$4.85"
        assert parser.extract_amount("1.10 2.20 3.30") == "$3.30"

    def test_extract_amount_ignores_embedded_numbers(self, parser):
        """Bare amounts must be bounded by whitespace or string edges."""
        assert parser.extract_amount("SKU A12.34B") == "$0.00"
        assert parser.extract_amount("Price 12.345") == "$0.00"

    def test_extract_amount_discards_zero(self, parser):
        assert parser.extract_amount("Discount 0.00") == "$0.00"
        assert parser.extract_amount("Total 0.00 Paid 5.00") == "$5.00"

    def test_extract_amount_fallback(self, parser):
        invalid_texts = [
            "no numbers",
            "Price: free",
            "Random numbers 123ABC",
            ""
        ]

        for text in invalid_texts:
            assert parser.extract_amount(text) == "$0.00", f"Should not extract amount from: {text}"

    def test_extract_amount_ignores_non_ascii_digits(self, parser):
        assert parser.extract_amount("١٢.٥٠") == "$0.00"
        assert parser.extract_amount("Total ١٢.٥٠ Cash 3.00") == "$3.00"

    def test_find_amount_candidates(self, parser):
        candidates = parser.find_amount_candidates("Subtotal 12.50 Tax 1.10 Total 13.60")
        assert candidates == [Decimal("12.50"), Decimal("1.10"), Decimal("13.60")]

    def test_categorize_keywords(self, parser):
        test_cases = [
            ("Best Pizza Place", "Food & Dining"),
            ("SAFEWAY #1234", "Groceries"),
            ("Shell fuel pump 4", "Transportation"),
            ("Amazon.com order", "Shopping"),
            ("CVS Pharmacy", "Healthcare"),
            ("AMC Cinema 12", "Entertainment"),
            ("City Electric Co", "Utilities"),
        ]

        for text, expected in test_cases:
            assert parser.categorize(text) == expected, f"Failed for text: {text}"

    def test_categorize_precedence(self, parser):
        """Earlier-declared categories win over later ones."""
        assert parser.categorize("pharmacy pizza") == "Food & Dining"
        assert parser.categorize("walmart pharmacy") == "Groceries"

    def test_categorize_catch_all(self, parser):
        assert parser.categorize("xyz unrelated text") == "Other"
        assert parser.categorize("") == "Other"

    def test_categorize_is_stable(self, parser):
        text = "Target store with a movie ticket"
        results = {parser.categorize(text) for _ in range(10)}
        assert results == {"Shopping"}

    def test_category_table_order(self, parser):
        labels = [label for label, _ in parser.CATEGORY_KEYWORDS]
        assert labels == [
            "Food & Dining", "Groceries", "Transportation", "Shopping",
            "Healthcare", "Entertainment", "Utilities"
        ]

    def test_extract_complete(self, parser, sample_receipt_text):
        draft = parser.extract(sample_receipt_text, NOW)

        assert isinstance(draft, ExpenseDraft)
        assert draft.merchant == "STARBUCKS COFFEE #12345"
        assert draft.date == "2024-01-15"
        assert draft.amount == "$8.65"
        assert draft.category == "Food & Dining"
        assert draft.description == "STARBUCKS COFFEE #12345 - Food & Dining"

    def test_extract_merchant_selection(self, parser):
        draft = parser.extract("Joe's Diner\n123 Main St\nTotal 9.99", NOW)
        assert draft.merchant == "Joe's Diner"
        assert draft.amount == "$9.99"
        assert draft.date == "2025-06-01"

    @pytest.mark.parametrize("text", [
        "",
        "   \n\t  \n",
        "no digits at all",
        "!!!\n???\n~~~",
        "0.00 0,00",
        "99/99/99",
        "receipt\nreceipt\nreceipt",
    ])
    def test_extract_is_total(self, parser, text):
        """Every input yields a fully populated draft."""
        draft = parser.extract(text, NOW)

        for field in ("date", "merchant", "amount", "category", "description"):
            assert getattr(draft, field)
        assert draft.description == f"{draft.merchant} - {draft.category}"

    def test_extract_degenerate_input_uses_fallbacks(self, parser):
        draft = parser.extract("", NOW)

        assert draft.date == "2025-06-01"
        assert draft.merchant == "Unknown Merchant"
        assert draft.amount == "$0.00"
        assert draft.category == "Other"
        assert draft.description == "Unknown Merchant - Other"

    def test_fallbacks_are_logged(self, parser, caplog):
        with caplog.at_level(logging.DEBUG, logger="receipt_scan.parsing"):
            parser.extract("", NOW)

        messages = [record.getMessage() for record in caplog.records]
        for field in ("date", "merchant", "amount", "category"):
            assert any(f"using fallback {field}" in m for m in messages), field

    def test_found_fields_are_not_logged_as_fallbacks(self, parser, caplog):
        with caplog.at_level(logging.DEBUG, logger="receipt_scan.parsing"):
            parser.extract("Corner Cafe\n2024-02-29\nTotal 4.50", NOW)

        assert not any("fallback" in r.getMessage() for r in caplog.records)


class TestExtractExpense:
    """Test cases for the module-level extract_expense function."""

    def test_matches_parser(self):
        text = "Corner Cafe\n2024-02-29\nTotal 4.50"
        assert extract_expense(text, NOW) == ReceiptTextParser().extract(text, NOW)

    def test_draft_is_frozen(self):
        draft = extract_expense("Corner Cafe", NOW)
        with pytest.raises(Exception):
            draft.merchant = "Other Place"


if __name__ == "__main__":
    pytest.main([__file__])
