"""
Receipt text interpretation for expense extraction.
Turns raw OCR text into an ExpenseDraft with deterministic fallbacks.
"""

import re
import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Tuple

from .models import (
    ExpenseDraft, UNKNOWN_MERCHANT, DEFAULT_CATEGORY, ZERO_AMOUNT
)

logger = logging.getLogger(__name__)

class ReceiptTextParser:
    """Extracts date, merchant, amount and category from receipt text."""

    # First date-like substring wins
    DATE_PATTERN = re.compile(r'(\d{1,2}[-/]\d{1,2}[-/]\d{2,4})|(\d{4}[-/]\d{1,2}[-/]\d{1,2})', re.ASCII)
    YEAR_FIRST_PATTERN = re.compile(r'(\d{4})[-/](\d{1,2})[-/](\d{1,2})', re.ASCII)
    MONTH_FIRST_PATTERN = re.compile(r'(\d{1,2})[-/](\d{1,2})[-/](\d{2,4})', re.ASCII)

    # Keyword-prefixed amount, or a bare amount token bounded by whitespace
    AMOUNT_PATTERN = re.compile(
        r'(?:total|amount|sum)[\s:$]*(\d+[.,]\d{2})|(?<!\S)(\d+[.,]\d{2})(?!\S)',
        re.IGNORECASE | re.ASCII
    )

    MERCHANT_LINES = 3
    MERCHANT_MIN_LENGTH = 3
    MERCHANT_MAX_LENGTH = 50

    # Order matters: the first category with a matching keyword wins
    CATEGORY_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
        ('Food & Dining', ('restaurant', 'cafe', 'coffee', 'pizza', 'burger', 'food', 'dining', 'bar', 'grill', 'kitchen')),
        ('Groceries', ('grocery', 'market', 'supermarket', 'whole foods', 'trader', 'safeway', 'walmart')),
        ('Transportation', ('gas', 'fuel', 'uber', 'lyft', 'taxi', 'parking', 'transit')),
        ('Shopping', ('store', 'shop', 'retail', 'mall', 'amazon', 'target')),
        ('Healthcare', ('pharmacy', 'medical', 'doctor', 'clinic', 'hospital', 'cvs', 'walgreens')),
        ('Entertainment', ('movie', 'cinema', 'theater', 'concert', 'ticket', 'entertainment')),
        ('Utilities', ('electric', 'water', 'internet', 'phone', 'utility')),
    )

    def __init__(self):
        """Initialize the text parser."""
        self.logger = logger

    def extract(self, raw_text: str, now: date) -> ExpenseDraft:
        """Extract an expense draft from raw OCR text.

        Never raises for string input: any field that cannot be found takes
        its fallback value.

        Args:
            raw_text: Verbatim OCR output
            now: Date used when no transaction date is found

        Returns:
            Fully populated ExpenseDraft
        """
        text = raw_text or ""
        lines = self.normalize_lines(text)

        transaction_date = self.extract_date(text, now)
        merchant = self.extract_merchant(lines)
        amount = self.extract_amount(text)
        category = self.categorize(text)

        return ExpenseDraft(
            date=transaction_date,
            merchant=merchant,
            amount=amount,
            category=category,
            description=f"{merchant} - {category}"
        )

    def normalize_lines(self, text: str) -> List[str]:
        """Split text into trimmed, non-empty lines in original order."""
        return [line.strip() for line in text.split('\n') if line.strip()]

    def extract_date(self, text: str, now: date) -> str:
        """Extract the transaction date as YYYY-MM-DD.

        Month and day ranges are not validated; a malformed numeric date is
        passed through as read.

        Args:
            text: Raw text content
            now: Fallback date

        Returns:
            Canonical date string
        """
        match = self.DATE_PATTERN.search(text)
        if match:
            parsed = self._format_date(match.group(0))
            if parsed:
                return parsed
            self.logger.debug(f"Could not parse date-like text: {match.group(0)}")
        else:
            self.logger.debug("No date found, using fallback date")

        return now.strftime('%Y-%m-%d')

    def _format_date(self, date_str: str) -> Optional[str]:
        """Rewrite a matched date substring in canonical order."""
        if date_str.startswith(('19', '20')):
            match = self.YEAR_FIRST_PATTERN.fullmatch(date_str)
            if match:
                year, month, day = match.groups()
                return f"{year}-{month.zfill(2)}-{day.zfill(2)}"

        # US receipts: month precedes day
        match = self.MONTH_FIRST_PATTERN.fullmatch(date_str)
        if match:
            month, day, year = match.groups()
            if len(year) == 2:
                year = '20' + year
            return f"{year}-{month.zfill(2)}-{day.zfill(2)}"

        return None

    def extract_merchant(self, lines: List[str]) -> str:
        """Guess the merchant name from the first few lines.

        Args:
            lines: Normalized text lines

        Returns:
            First qualifying line or the unknown-merchant sentinel
        """
        for line in lines[:self.MERCHANT_LINES]:
            if not self.MERCHANT_MIN_LENGTH < len(line) < self.MERCHANT_MAX_LENGTH:
                continue
            if re.match(r'[0-9]', line):
                continue
            if 'receipt' in line.lower():
                continue
            return line

        self.logger.debug("No merchant line qualified, using fallback merchant")
        return UNKNOWN_MERCHANT

    def find_amount_candidates(self, text: str) -> List[Decimal]:
        """Collect every positive currency-shaped amount in the text."""
        candidates = []

        for match in self.AMOUNT_PATTERN.finditer(text):
            amount_str = (match.group(1) or match.group(2)).replace(',', '.')
            try:
                amount = Decimal(amount_str)
            except InvalidOperation:
                continue
            if amount > 0:
                candidates.append(amount)

        return candidates

    def extract_amount(self, text: str) -> str:
        """Extract the receipt total as a $-formatted string.

        The largest candidate is taken as the total, since the grand total is
        usually the largest figure on a receipt.

        Args:
            text: Raw text content

        Returns:
            Formatted amount, or $0.00 when nothing was found
        """
        candidates = self.find_amount_candidates(text)
        if not candidates:
            self.logger.debug("No amount candidates found, using fallback amount")
            return ZERO_AMOUNT

        return f"${max(candidates):.2f}"

    def categorize(self, text: str) -> str:
        """Classify text into the first category with a matching keyword."""
        text_lower = text.lower()

        for category, keywords in self.CATEGORY_KEYWORDS:
            if any(keyword in text_lower for keyword in keywords):
                return category

        self.logger.debug("No category keywords matched, using fallback category")
        return DEFAULT_CATEGORY


_default_parser = ReceiptTextParser()


def extract_expense(raw_text: str, now: date) -> ExpenseDraft:
    """Extract an ExpenseDraft from raw OCR text using the default parser."""
    return _default_parser.extract(raw_text, now)
