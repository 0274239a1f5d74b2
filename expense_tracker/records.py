"""Transaction record normalization, validation and loading.

Every engine entry point funnels its input through :func:`normalize_records`,
which turns a snapshot of loosely typed records (dicts as they come out of
the realtime database, dataclass records, or a DataFrame) into a DataFrame
with canonical, well-typed columns.  Normalization never raises: a corrupt amount becomes
``0.0``, a blank category becomes the uncategorized sentinel and an
unparseable date becomes ``NaT``.

The write path is stricter.  :func:`validate_transaction` and
:func:`build_transaction` implement the entry-form rules and reject a bad
payload before it reaches the store.
"""

from __future__ import annotations

import dataclasses
import json
import numbers
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import numpy as np
import pandas as pd

from .config import UNCATEGORIZED_LABEL
from .logging_setup import get_logger

logger = get_logger(__name__)

TYPE_INCOME = 'income'
TYPE_EXPENSE = 'expense'
TRANSACTION_TYPES = (TYPE_INCOME, TYPE_EXPENSE)

TRANSACTION_COLUMNS = [
    'id',
    'type',
    'title',
    'amount',
    'date',
    'category',
    'description',
    'createdAt',
    'updatedAt',
]

RecordsLike = Union[pd.DataFrame, Iterable[Any], None]


class TransactionValidationError(ValueError):
    """Raised when a transaction payload fails write-path validation."""

    def __init__(self, errors: Mapping[str, str]):
        self.errors: Dict[str, str] = dict(errors)
        detail = "; ".join(f"{field}: {message}" for field, message in self.errors.items())
        super().__init__(f"Invalid transaction ({detail})")


# ---------------------------------------------------------------------------
# Scalar coercion
# ---------------------------------------------------------------------------


def _is_missing(value: Any) -> bool:
    if value is None or value is pd.NA or value is pd.NaT:
        return True
    if isinstance(value, float) and np.isnan(value):
        return True
    return False


def _parse_amount(value: Any) -> Optional[float]:
    """Convert an amount into a finite float, or ``None`` when it is not one."""
    if _is_missing(value) or isinstance(value, bool):
        return None
    if isinstance(value, str):
        cleaned = value.strip()
        # Display formatting from the UI: currency markers and thousands separators
        for marker in ('฿', '$', ','):
            cleaned = cleaned.replace(marker, '')
        if not cleaned:
            return None
        try:
            number = float(cleaned)
        except ValueError:
            return None
    elif isinstance(value, numbers.Number):
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
    else:
        return None
    if not np.isfinite(number):
        return None
    return number


def coerce_amount(value: Any) -> float:
    """Return ``value`` as a float, defaulting to ``0.0`` when it is missing or non-numeric."""
    parsed = _parse_amount(value)
    return 0.0 if parsed is None else parsed


def coerce_int(value: Any, default: int) -> int:
    """Return ``value`` as an int, or ``default`` when it is missing or not a number."""
    if _is_missing(value) or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return default


def coerce_date(value: Any) -> pd.Timestamp:
    """Parse a record date into a naive midnight timestamp.

    Timezone-aware values keep their wall-clock calendar date; no conversion
    to another zone is performed.  Anything unparseable becomes ``NaT``.
    """
    if _is_missing(value):
        return pd.NaT
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return pd.NaT
    elif not isinstance(value, (date, datetime, pd.Timestamp, np.datetime64)):
        return pd.NaT
    try:
        ts = pd.Timestamp(value)
    except (ValueError, TypeError, OverflowError):
        return pd.NaT
    if pd.isna(ts):
        return pd.NaT
    if ts.tzinfo is not None:
        ts = ts.tz_localize(None)
    return ts.normalize()


def clean_text(value: Any) -> str:
    if _is_missing(value):
        return ''
    return str(value).strip()


def clean_type(value: Any) -> str:
    if not isinstance(value, str):
        return ''
    return value.strip().lower()


def clean_category(value: Any, label: Optional[str] = None) -> str:
    text = clean_text(value)
    return text if text else (label or UNCATEGORIZED_LABEL)


# ---------------------------------------------------------------------------
# Snapshot normalization (read path)
# ---------------------------------------------------------------------------


def records_to_list(records: RecordsLike) -> List[Dict[str, Any]]:
    """Return the snapshot (mappings, dataclass records or a DataFrame) as plain dicts in their original order."""
    if records is None:
        return []
    if isinstance(records, pd.DataFrame):
        if records.empty:
            return []
        frame = records.astype(object).where(records.notna(), None)
        return frame.to_dict('records')
    rows: List[Dict[str, Any]] = []
    skipped = 0
    for item in records:
        if isinstance(item, Mapping):
            rows.append(dict(item))
        elif dataclasses.is_dataclass(item) and not isinstance(item, type):
            rows.append(dataclasses.asdict(item))
        else:
            skipped += 1
    if skipped:
        logger.debug("Ignored %d entries in record snapshot that are neither mappings nor dataclasses", skipped)
    return rows


def normalize_records(records: RecordsLike, uncategorized_label: Optional[str] = None) -> pd.DataFrame:
    """Normalize a record snapshot into a DataFrame with canonical columns.

    The result has one row per record, in input order, with:

    * ``type`` stripped and lower-cased (unknown values kept as-is)
    * ``amount`` as float, ``0.0`` for missing or non-numeric values
    * ``category`` with blanks replaced by the uncategorized sentinel
    * ``title``/``description`` as strings
    * ``parsed_date`` as ``datetime64`` (``NaT`` when unparseable)
    * ``position`` holding the original index of the record
    """
    label = uncategorized_label or UNCATEGORIZED_LABEL
    rows = records_to_list(records)
    df = pd.DataFrame(rows, columns=_column_order(rows))

    raw_amounts = df['amount'].tolist()
    parsed_amounts = [_parse_amount(value) for value in raw_amounts]
    invalid_amounts = sum(1 for value in parsed_amounts if value is None)
    df['amount'] = (
        pd.to_numeric(pd.Series(parsed_amounts, index=df.index, dtype=object), errors='coerce')
        .fillna(0.0)
        .astype(float)
    )

    df['type'] = df['type'].apply(clean_type)
    df['title'] = df['title'].apply(clean_text)
    df['description'] = df['description'].apply(clean_text)
    df['category'] = df['category'].apply(lambda value: clean_category(value, label))
    df['parsed_date'] = pd.to_datetime(
        pd.Series([coerce_date(value) for value in df['date'].tolist()], index=df.index, dtype=object),
        errors='coerce',
    )
    df['position'] = np.arange(len(df))

    if len(df):
        unknown_types = int((~df['type'].isin(TRANSACTION_TYPES)).sum())
        missing_dates = int(df['parsed_date'].isna().sum())
        if invalid_amounts or unknown_types or missing_dates:
            logger.debug(
                "Normalized %d records: %d amounts defaulted to 0, %d unknown types, %d unparseable dates",
                len(df),
                invalid_amounts,
                unknown_types,
                missing_dates,
            )
    return df


def _column_order(rows: List[Dict[str, Any]]) -> List[str]:
    columns = list(TRANSACTION_COLUMNS)
    for row in rows:
        for key in row:
            if key not in columns:
                columns.append(key)
    return columns


# ---------------------------------------------------------------------------
# Entry-form validation (write path)
# ---------------------------------------------------------------------------


def validate_transaction(data: Mapping[str, Any], *, partial: bool = False) -> Dict[str, str]:
    """Check a transaction payload against the entry-form rules.

    Returns a mapping of field name to message; an empty mapping means the
    payload is valid.  With ``partial=True`` only the fields present in
    ``data`` are checked, which is how edits are validated.
    """
    errors: Dict[str, str] = {}

    def _checks(field: str) -> bool:
        return not partial or field in data

    if _checks('type') and clean_type(data.get('type')) not in TRANSACTION_TYPES:
        errors['type'] = "Type must be 'income' or 'expense'"

    if _checks('title') and not clean_text(data.get('title')):
        errors['title'] = "Title is required"

    if _checks('amount'):
        amount = _parse_amount(data.get('amount'))
        if amount is None or amount <= 0:
            errors['amount'] = "Enter a valid amount greater than zero"

    if _checks('date') and pd.isna(coerce_date(data.get('date'))):
        errors['date'] = "Select a valid date"

    return errors


def build_transaction(data: Mapping[str, Any], *, partial: bool = False) -> Dict[str, Any]:
    """Validate ``data`` and return the cleaned payload to hand to the store.

    Raises
    ------
    TransactionValidationError
        If any field fails validation.
    """
    errors = validate_transaction(data, partial=partial)
    if errors:
        raise TransactionValidationError(errors)

    cleaned: Dict[str, Any] = {}
    for key, value in data.items():
        if key in ('id', 'createdAt', 'updatedAt'):
            continue
        if key == 'type':
            cleaned[key] = clean_type(value)
        elif key == 'amount':
            cleaned[key] = coerce_amount(value)
        elif key == 'date':
            cleaned[key] = coerce_date(value).date().isoformat()
        elif key in ('title', 'category', 'description'):
            cleaned[key] = clean_text(value)
        else:
            cleaned[key] = value
    if not partial:
        cleaned.setdefault('category', '')
        cleaned.setdefault('description', '')
    return cleaned


# ---------------------------------------------------------------------------
# Snapshot files
# ---------------------------------------------------------------------------


def load_records(path: Union[str, Path]) -> List[Dict[str, Any]]:
    """Load a record snapshot from a JSON or CSV file.

    JSON may be a list of records or an object keyed by record id, the
    shape the realtime database exports; keys become the ``id`` field.
    """
    path = Path(path)
    ext = path.suffix.lower()
    if ext == '.json':
        with path.open('r', encoding='utf-8') as handle:
            data = json.load(handle)
        return records_from_json(data)
    if ext in {'.csv', ''}:
        return records_to_list(_read_csv(path))
    raise ValueError(f"Unsupported file extension '{ext}'.")


def records_from_json(data: Any) -> List[Dict[str, Any]]:
    if isinstance(data, Mapping) and 'transactions' in data:
        data = data['transactions']
    if data is None:
        return []
    if isinstance(data, list):
        return records_to_list(data)
    if isinstance(data, Mapping):
        rows: List[Dict[str, Any]] = []
        for key, value in data.items():
            if isinstance(value, Mapping):
                rows.append({'id': key, **value})
        return rows
    raise ValueError(f"Unsupported JSON snapshot of type '{type(data).__name__}'.")


def _read_csv(path: Path) -> pd.DataFrame:
    encodings = ['utf-8', 'utf-8-sig', 'latin-1', 'cp1252']
    delimiters = [',', ';', '\t', '|']
    for encoding in encodings:
        for delimiter in delimiters:
            try:
                df = pd.read_csv(path, encoding=encoding, delimiter=delimiter, index_col=False)
            except (UnicodeDecodeError, pd.errors.ParserError):
                continue
            except pd.errors.EmptyDataError:
                return pd.DataFrame(columns=TRANSACTION_COLUMNS)
            if df.shape[1] > 1:
                return df.reset_index(drop=True)
    # Final fallback
    return pd.read_csv(path, index_col=False).reset_index(drop=True)
