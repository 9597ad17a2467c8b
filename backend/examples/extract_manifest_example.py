#!/usr/bin/env python3
"""
AutoMMR - Example Usage
=======================

Runs the manifest extraction on a local image or PDF and prints the result.

Usage:
    python examples/extract_manifest_example.py path/to/mmr.pdf
    python examples/extract_manifest_example.py mmr.jpg --output result.json --xlsx export.xlsx
    python examples/extract_manifest_example.py form.png --mode sections

Requirements:
    - GEMINI_API_KEY (or OPENAI_API_KEY with EXTRACTION_PROVIDER=openai)
    - poppler installed for PDF input (used by pdf2image)
"""

import sys
import json
import argparse
import logging
import mimetypes
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from autommr.errors import AutoMMRError
from autommr.services.exporter import build_workbook, item_weight_kg, total_weight_kg
from autommr.services.manifest_pipeline import MMRExtractor, get_provider
from autommr.utils.document_loader import load_document

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def print_manifest(outcome):
    """Print the typed manifest result."""
    header = outcome.data.header

    print("\n" + "=" * 60)
    print("MMR EXTRACTION RESULTS")
    print("=" * 60)
    print(f"\nMMR N°: {header.mmr_no or 'N/A'}")
    print(f"Data: {header.date or 'N/A'}")
    print(f"Gerador: {header.generator or 'N/A'}")
    print(f"Transportador: {header.carrier or 'N/A'}")
    print(f"Base de Apoio: {header.base_location or 'N/A'}")
    print(f"Pages: {outcome.pages}  Requests: {outcome.requests_made}  Time: {outcome.processing_time_ms}ms")
    if outcome.recovered:
        print(f"Recovered from malformed JSON, dropped {outcome.dropped_count} fragment(s)")

    print("\n" + "-" * 40)
    print(f"WASTE ITEMS ({len(outcome.data.items)})")
    print("-" * 40)
    for item in outcome.data.items:
        weight = item_weight_kg(item)
        weight_str = f"{weight:,.1f} kg" if weight is not None else "?"
        print(f"  [{item.item_id or '-':>4}] {item.code or '-':6} {(item.waste_type or '')[:35]:35} {weight_str}")

    print(f"\nTotal weight: {total_weight_kg(outcome.data.items):,.1f} kg")


def print_sections(outcome):
    """Print generic sections."""
    for section in outcome.sections:
        print(f"\n{section.title}")
        print("-" * len(section.title))
        for field in section.fields:
            print(f"  {field.topic}: {field.answer if field.answer is not None else 'N/A'}")


def process_file(path: str, mode: str = "mmr", output_path: str = None, xlsx_path: str = None):
    """
    Run the extraction on a local file.

    Args:
        path: Path to the image or PDF
        mode: 'mmr' or 'sections'
        output_path: Optional path to save JSON output
        xlsx_path: Optional path to save the Excel export (mmr mode only)
    """
    path = Path(path)
    if not path.exists():
        logger.error(f"File not found: {path}")
        return None

    content_type, _ = mimetypes.guess_type(path.name)
    images = load_document(path.name, content_type, path.read_bytes())
    logger.info(f"Loaded {path.name}: {len(images)} page(s)")

    extractor = MMRExtractor(get_provider())
    if mode == "sections":
        outcome = extractor.extract_sections(images)
        print_sections(outcome)
    else:
        outcome = extractor.extract(images)
        print_manifest(outcome)

    if output_path:
        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(outcome.to_dict(), f, indent=2, ensure_ascii=False)
        print(f"\nJSON output saved to: {output_path}")

    if xlsx_path and outcome.data is not None:
        Path(xlsx_path).write_bytes(build_workbook(outcome.data))
        print(f"Excel export saved to: {xlsx_path}")

    return outcome


def main():
    parser = argparse.ArgumentParser(
        description="Extract data from a Maritime Waste Manifest (MMR) image or PDF"
    )
    parser.add_argument("file", help="Path to the image or PDF")
    parser.add_argument("--mode", choices=["mmr", "sections"], default="mmr", help="Extraction mode")
    parser.add_argument("--output", "-o", help="Path to save JSON output")
    parser.add_argument("--xlsx", help="Path to save the Excel export")

    args = parser.parse_args()

    try:
        result = process_file(args.file, mode=args.mode, output_path=args.output, xlsx_path=args.xlsx)
    except AutoMMRError as e:
        logger.error(e.message)
        sys.exit(1)

    if result is None:
        sys.exit(1)


if __name__ == "__main__":
    main()
