from __future__ import annotations

import argparse
import json
import logging
import os
from typing import List, Optional

from .export import save_result_to_excel
from .pdf import parse_statement_pdf
from .rules import DEFAULT_RULES_NAME, find_rules_file, load_rules

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="statement_converter",
        description="Extract, normalise and categorise transactions from a bank statement PDF",
    )
    parser.add_argument("pdf_path", help="Path to the statement PDF")
    parser.add_argument("-o", "--output", help="Excel output path (default: next to the PDF)")
    parser.add_argument(
        "--rules",
        help=f"Categorisation rules file (.csv or .xlsx); default: '{DEFAULT_RULES_NAME}' beside the PDF, if present",
    )
    parser.add_argument("--json", action="store_true", help="Print the parse result as JSON instead of writing Excel")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def _default_output_path(pdf_path: str) -> str:
    base, _ = os.path.splitext(pdf_path)
    return f"{base}.xlsx"


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if not os.path.exists(args.pdf_path):
        logger.error("File not found: %s", args.pdf_path)
        return 1

    rules_path = args.rules or find_rules_file(os.path.dirname(os.path.abspath(args.pdf_path)), DEFAULT_RULES_NAME)
    rules = load_rules(rules_path) if rules_path else None
    result = parse_statement_pdf(args.pdf_path, rules=rules)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return 0 if result.transactions else 2

    for err in result.errors:
        logger.warning("%s", err)
    if not result.transactions:
        return 2

    written = save_result_to_excel(result, args.output or _default_output_path(args.pdf_path))
    print(f"{result.total_transactions} transactions ({result.bank_name}) written to: {written}")
    return 0

