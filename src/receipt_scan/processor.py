"""
Receipt image processing: OCR followed by expense extraction.
"""

import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple

from .models import ExpenseDraft, ProcessingResult
from .ocr import OCRError, TesseractOCR
from .parsing import ReceiptTextParser

logger = logging.getLogger(__name__)

class ReceiptProcessor:
    """Runs OCR on receipt images and extracts expense drafts."""

    # Supported file extensions
    SUPPORTED_EXTENSIONS = {'.png', '.jpg', '.jpeg', '.bmp', '.tiff', '.tif', '.gif', '.webp'}

    def __init__(self, ocr: Optional[TesseractOCR] = None,
                 parser: Optional[ReceiptTextParser] = None,
                 clock: Callable[[], datetime] = datetime.now):
        """Initialize the receipt processor.

        Args:
            ocr: Text recognition provider
            parser: Receipt text parser
            clock: Source of the fallback date for undated receipts
        """
        self.logger = logger
        self.ocr = ocr or TesseractOCR()
        self.parser = parser or ReceiptTextParser()
        self.clock = clock

    def process_text(self, raw_text: str) -> ExpenseDraft:
        """Extract an expense draft from already recognized text."""
        return self.parser.extract(raw_text, self.clock())

    def process_file(self, file_content: bytes, filename: str) -> ProcessingResult:
        """Process an uploaded receipt image.

        Args:
            file_content: Raw file content as bytes
            filename: Original filename

        Returns:
            ProcessingResult with the extracted draft or the failure reason
        """
        start_time = time.perf_counter()

        if not self._validate_file(filename):
            return ProcessingResult(
                success=False,
                filename=filename,
                errors=[f"Unsupported file type: {Path(filename).suffix}"]
            )

        try:
            raw_text = self.ocr.recognize(file_content)
        except OCRError as e:
            self.logger.error(f"OCR failed for {filename}: {e}")
            return ProcessingResult(
                success=False,
                filename=filename,
                errors=[f"OCR failed: {e}"],
                retryable=e.retryable,
                processing_time=time.perf_counter() - start_time
            )

        draft = self.process_text(raw_text)
        processing_time = time.perf_counter() - start_time

        self.logger.info(f"Processed {filename} in {processing_time:.2f} seconds")
        return ProcessingResult(
            success=True,
            filename=filename,
            raw_text=raw_text,
            draft=draft,
            processing_time=processing_time
        )

    def process_batch(self, files: Iterable[Tuple[bytes, str]]) -> List[ProcessingResult]:
        """Process several receipt images independently.

        Args:
            files: (content, filename) pairs

        Returns:
            One ProcessingResult per file, in input order
        """
        return [self.process_file(content, filename) for content, filename in files]

    def _validate_file(self, filename: str) -> bool:
        """Check whether the file extension is a supported image type."""
        return Path(filename).suffix.lower() in self.SUPPORTED_EXTENSIONS
