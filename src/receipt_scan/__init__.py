"""
Receipt expense extraction: OCR text in, structured expense draft out.
"""

from .models import ExpenseDraft, Expense, ExpenseUpdate, ProcessingResult, EXPENSE_CATEGORIES
from .parsing import ReceiptTextParser, extract_expense
from .ocr import OCRError, TesseractOCR
from .processor import ReceiptProcessor
from .database import ExpenseStore

__all__ = [
    'ExpenseDraft',
    'Expense',
    'ExpenseUpdate',
    'ProcessingResult',
    'EXPENSE_CATEGORIES',
    'ReceiptTextParser',
    'extract_expense',
    'OCRError',
    'TesseractOCR',
    'ReceiptProcessor',
    'ExpenseStore'
]
