"""
Text recognition for receipt images using Tesseract.
"""

import io
import logging
from typing import Optional

import pytesseract
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

class OCRError(Exception):
    """Raised when text could not be recognized from an image."""

    retryable = True


class TesseractOCR:
    """Recognizes text in receipt images with pytesseract."""

    def __init__(self, lang: str = 'eng', tesseract_cmd: Optional[str] = None, timeout: float = 0):
        """Initialize the OCR provider.

        Args:
            lang: Tesseract language code
            tesseract_cmd: Path to the tesseract binary, if not on PATH
            timeout: Seconds before recognition is abandoned (0 disables)
        """
        self.logger = logger
        self.lang = lang
        self.timeout = timeout

        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd

        try:
            pytesseract.get_tesseract_version()
            self.available = True
            self.logger.info("Tesseract OCR is available")
        except Exception as e:
            self.available = False
            self.logger.warning(f"Tesseract OCR not available: {e}")

    def recognize(self, image_bytes: bytes) -> str:
        """Recognize text in an image.

        Args:
            image_bytes: Encoded image content

        Returns:
            Recognized text, possibly empty

        Raises:
            OCRError: If the image cannot be read or Tesseract fails
        """
        if not self.available:
            raise OCRError("OCR not available - Tesseract not installed")

        try:
            image = Image.open(io.BytesIO(image_bytes))
            return pytesseract.image_to_string(image, lang=self.lang, timeout=self.timeout)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
            raise OCRError(f"Could not read image: {e}") from e
        except pytesseract.TesseractError as e:
            raise OCRError(f"Tesseract failed: {e}") from e
        except RuntimeError as e:
            # pytesseract signals a timeout with RuntimeError
            raise OCRError(f"Recognition timed out: {e}") from e
