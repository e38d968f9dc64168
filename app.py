"""
Receipt Scanning - Command-line Entry Point
Runs OCR on receipt images and prints the extracted expenses as JSON.
"""

import argparse
import json
import sys
import logging
from pathlib import Path

# Add src directory to Python path
src_path = Path(__file__).parent / "src"
sys.path.insert(0, str(src_path))

from receipt_scan.database import ExpenseStore
from receipt_scan.ocr import TesseractOCR
from receipt_scan.processor import ReceiptProcessor

logger = logging.getLogger(__name__)

def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Extract expenses from receipt images")
    parser.add_argument("files", nargs="+", help="Receipt image files")
    parser.add_argument("--lang", default="eng", help="Tesseract language code")
    parser.add_argument("--tesseract-cmd", default=None, help="Path to the tesseract binary")
    parser.add_argument("--timeout", type=float, default=0, help="OCR timeout in seconds")
    parser.add_argument("--save", action="store_true", help="Store extracted expenses")
    parser.add_argument("--db", default="expenses.db", help="SQLite database path")
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    return parser.parse_args(argv)

def main(argv=None) -> int:
    """Main application function."""
    args = parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr
    )

    processor = ReceiptProcessor(
        ocr=TesseractOCR(lang=args.lang, tesseract_cmd=args.tesseract_cmd, timeout=args.timeout)
    )

    store = None
    if args.save:
        store = ExpenseStore(args.db)
        store.initialize_database()

    failed = False
    files = []
    for name in args.files:
        path = Path(name)
        try:
            files.append((path.read_bytes(), path.name))
        except OSError as e:
            logger.error(f"Cannot read {name}: {e}")
            print(json.dumps({"file": path.name, "errors": [str(e)], "retryable": False}))
            failed = True

    for result in processor.process_batch(files):
        if not result.success:
            failed = True
            print(json.dumps({
                "file": result.filename,
                "errors": result.errors,
                "retryable": result.retryable
            }))
            continue

        output = {"file": result.filename, **result.draft.model_dump()}
        if store is not None:
            output["id"] = store.create_expense(result.draft).id
        print(json.dumps(output))

    return 1 if failed else 0

if __name__ == "__main__":
    sys.exit(main())
