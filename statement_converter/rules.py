"""User categorisation rules.

A rules file is a CSV or XLSX table with the columns
``Priority, Category, Match Type, Pattern, Direction, Active``. Rules are
applied after the built-in classifier, lowest priority number first, and the
first matching rule sets the category.
"""

from __future__ import annotations

import logging
import os
import re
from typing import Iterable, List, Optional

import pandas as pd

from .categories import TRANSACTION_CATEGORIES
from .models import ParsedTransaction, TransactionType

logger = logging.getLogger(__name__)


# ----------------------------
# CONFIG
# ----------------------------

RULES_SHEET_NAME = "Category Rules"
# Looked up beside the statement when no rules file is given.
DEFAULT_RULES_NAME = "Categorisation Rules"
CSV_ENCODINGS = ["utf-8-sig", "utf-8", "cp1252", "latin1"]
DEFAULT_PRIORITY = 9999
RULE_CONFIDENCE = 0.95
MATCH_TYPES = {"contains", "exact", "startswith", "endswith", "regex"}


def find_rules_file(folder: str, base_name: str) -> Optional[str]:
    if not folder:
        return None
    xlsx_path = os.path.join(folder, f"{base_name}.xlsx")
    if os.path.exists(xlsx_path):
        return xlsx_path
    csv_path = os.path.join(folder, f"{base_name}.csv")
    if os.path.exists(csv_path):
        return csv_path
    return None


def _read_rules_csv(path: str) -> Optional[pd.DataFrame]:
    last_err: Optional[Exception] = None
    for enc in CSV_ENCODINGS:
        try:
            return pd.read_csv(path, encoding=enc, dtype=str, keep_default_na=False)
        except UnicodeDecodeError as e:
            last_err = e
        except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            last_err = e
            break
    logger.warning("Failed to read rules CSV '%s': %s", path, last_err)
    return None


def _read_rules_frame(path: str) -> Optional[pd.DataFrame]:
    if path.lower().endswith(".csv"):
        return _read_rules_csv(path)
    try:
        excel = pd.ExcelFile(path)
        sheet_name = RULES_SHEET_NAME if RULES_SHEET_NAME in excel.sheet_names else excel.sheet_names[0]
        return pd.read_excel(excel, sheet_name=sheet_name, dtype=str, keep_default_na=False)
    except (OSError, ValueError) as e:
        logger.warning("Failed to read rules file '%s': %s", path, e)
        return None


def _as_bool(v, default: bool = True) -> bool:
    if v is None:
        return default
    if isinstance(v, bool):
        return v
    s = str(v).strip().lower()
    if s in {"", "nan"}:
        return default
    if s in {"true", "1", "yes", "y", "on"}:
        return True
    if s in {"false", "0", "no", "n", "off"}:
        return False
    return default


def _as_priority(v) -> int:
    if v is None:
        return DEFAULT_PRIORITY
    s = str(v).strip()
    if not s or s.lower() == "nan":
        return DEFAULT_PRIORITY
    try:
        return int(float(s))
    except ValueError:
        return DEFAULT_PRIORITY


def _cell(row: pd.Series, column: str) -> str:
    v = row.get(column) if column in row else ""
    s = "" if v is None else str(v).strip()
    return "" if s.lower() == "nan" else s


def rules_from_frame(df: pd.DataFrame) -> List[dict]:
    records: List[dict] = []
    for _, row in df.iterrows():
        if not _as_bool(row.get("Active") if "Active" in row else None, default=True):
            continue
        category = _cell(row, "Category")
        pattern = _cell(row, "Pattern")
        if not category or not pattern:
            continue

        match_type = _cell(row, "Match Type").lower() or "contains"
        if match_type not in MATCH_TYPES:
            logger.warning("Unknown match type %r for pattern %r; using 'contains'", match_type, pattern)
            match_type = "contains"
        if match_type == "regex":
            try:
                re.compile(pattern)
            except re.error as e:
                logger.warning("Skipping rule with invalid regex %r: %s", pattern, e)
                continue

        if category not in TRANSACTION_CATEGORIES:
            logger.info("Rule category %r is not a built-in category", category)

        records.append(
            {
                "Priority": _as_priority(row.get("Priority") if "Priority" in row else None),
                "Category": category,
                "Match Type": match_type,
                "Pattern": pattern,
                "Direction": _cell(row, "Direction").upper(),
            }
        )

    records.sort(key=lambda r: r.get("Priority", DEFAULT_PRIORITY))
    return records


def load_rules(path: str) -> List[dict]:
    """Read an active, priority-ordered rule list; unreadable files give no rules."""
    if not path or not os.path.exists(path):
        logger.warning("Categorisation rules file not found: '%s'", path)
        return []
    df = _read_rules_frame(path)
    if df is None:
        return []
    rules = rules_from_frame(df)
    logger.info("Loaded %d categorisation rules from '%s'", len(rules), path)
    return rules


def rule_matches(txn: ParsedTransaction, rule: dict) -> bool:
    pattern = str(rule.get("Pattern", "") or "").strip()
    if not pattern:
        return False

    direction = str(rule.get("Direction", "") or "").strip().upper()
    if direction and direction != "ANY":
        if direction == "DEBIT" and txn.type != TransactionType.DEBIT:
            return False
        if direction == "CREDIT" and txn.type != TransactionType.CREDIT:
            return False

    match_type = str(rule.get("Match Type", "") or "").strip().lower() or "contains"
    desc_cmp = (txn.description or "").strip()
    desc_low = desc_cmp.lower()
    patt_low = pattern.lower()

    if match_type == "exact":
        return desc_low == patt_low
    if match_type == "startswith":
        return desc_low.startswith(patt_low)
    if match_type == "endswith":
        return desc_low.endswith(patt_low)
    if match_type == "regex":
        try:
            return re.search(pattern, desc_cmp, re.IGNORECASE) is not None
        except re.error:
            return False
    return patt_low in desc_low


def apply_rules(transactions: Iterable[ParsedTransaction], rules: List[dict]) -> int:
    """Override categories from user rules in place. Returns the number of transactions changed."""
    if not rules:
        return 0
    changed = 0
    for txn in transactions:
        for rule in rules:
            if rule_matches(txn, rule):
                txn.category = rule.get("Category", txn.category)
                txn.confidence = max(txn.confidence, RULE_CONFIDENCE)
                changed += 1
                break
    return changed
