"""
Data models using Pydantic for receipt expense extraction.
Provides validation and type checking for extracted and stored expenses.
"""

from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field, field_validator
import re

UNKNOWN_MERCHANT = "Unknown Merchant"
DEFAULT_CATEGORY = "Other"
ZERO_AMOUNT = "$0.00"

EXPENSE_CATEGORIES = (
    "Food & Dining",
    "Groceries",
    "Transportation",
    "Shopping",
    "Healthcare",
    "Entertainment",
    "Utilities",
    DEFAULT_CATEGORY,
)

AMOUNT_FORMAT = re.compile(r'\$\d+\.\d{2}', re.ASCII)


def _normalize_category(v):
    if v is None:
        return DEFAULT_CATEGORY
    for category in EXPENSE_CATEGORIES:
        if v.strip().lower() == category.lower():
            return category
    return DEFAULT_CATEGORY


def _check_amount(v):
    if not AMOUNT_FORMAT.fullmatch(v):
        raise ValueError('Amount must look like $12.34')
    return v


class ExpenseDraft(BaseModel):
    """Best-effort expense record extracted from one receipt's text."""

    date: str = Field(..., description="Transaction date as YYYY-MM-DD")
    merchant: str = Field(..., description="Merchant name or the unknown sentinel")
    amount: str = Field(..., description="Total amount formatted as $12.34")
    category: str = Field(..., description="Spending category label")
    description: str = Field(..., description="Derived '<merchant> - <category>' text")

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "example": {
                "date": "2024-01-15",
                "merchant": "Starbucks Coffee",
                "amount": "$8.65",
                "category": "Food & Dining",
                "description": "Starbucks Coffee - Food & Dining"
            }
        }
    }


class Expense(BaseModel):
    """Stored expense record keyed by an opaque identifier."""

    id: str = Field(..., min_length=1, description="Opaque record identifier")
    date: str = Field(..., min_length=1, description="Transaction date as YYYY-MM-DD")
    merchant: str = Field(..., max_length=200, description="Merchant name")
    amount: str = Field(ZERO_AMOUNT, description="Total amount formatted as $12.34")
    category: str = Field(DEFAULT_CATEGORY, description="Spending category label")
    description: str = Field("", max_length=500, description="Free-text notes")
    created_at: Optional[datetime] = Field(None, description="Record creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    @field_validator('merchant')
    @classmethod
    def validate_merchant(cls, v):
        """Reject blank merchant names."""
        if not v or not v.strip():
            raise ValueError('Merchant name cannot be empty')
        return v.strip()

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v):
        """Validate the currency formatting of the amount."""
        return _check_amount(v)

    @field_validator('category')
    @classmethod
    def validate_category(cls, v):
        """Normalize category to one of the known labels."""
        return _normalize_category(v)

    @classmethod
    def from_draft(cls, draft: ExpenseDraft, expense_id: str) -> "Expense":
        """Build a storable expense from an extracted draft."""
        return cls(id=expense_id, **draft.model_dump())


class ExpenseUpdate(BaseModel):
    """Model for updating existing expenses."""

    date: Optional[str] = Field(None, min_length=1)
    merchant: Optional[str] = Field(None, max_length=200)
    amount: Optional[str] = Field(None)
    category: Optional[str] = Field(None)
    description: Optional[str] = Field(None, max_length=500)

    @field_validator('merchant')
    @classmethod
    def validate_merchant(cls, v):
        if v is not None and not v.strip():
            raise ValueError('Merchant name cannot be empty')
        return v.strip() if v is not None else v

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v):
        return _check_amount(v) if v is not None else v

    @field_validator('category')
    @classmethod
    def validate_category(cls, v):
        return _normalize_category(v) if v is not None else v


class ProcessingResult(BaseModel):
    """Model for receipt image processing results."""

    success: bool = Field(..., description="Whether processing was successful")
    filename: Optional[str] = Field(None, description="Original filename")
    raw_text: Optional[str] = Field(None, description="Text returned by OCR")
    draft: Optional[ExpenseDraft] = Field(None, description="Extracted expense")
    errors: List[str] = Field(default_factory=list, description="Processing errors")
    retryable: bool = Field(False, description="Whether retrying may succeed")
    processing_time: Optional[float] = Field(None, description="Processing time in seconds")
