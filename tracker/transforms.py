import logging
import math
from typing import Any, Iterable, Optional, Sequence, Tuple

import pandas as pd

from tracker.domain import Category, PieSlice, Transaction

logger = logging.getLogger(__name__)

CATEGORY_ID_KEYS = ("categoryId", "CategoryId", "id", "Id")
CATEGORY_NAME_KEYS = ("categoryName", "CategoryName", "name", "Name")
TRANSACTION_ID_KEYS = ("transactionsId", "TransactionsId", "transactionId", "TransactionId", "id", "Id")


def number_or(value: Any, fallback: float = 0.0) -> float:
    """Parse a number the way a loose form field would: "12.5", 12.5 or " 3 "."""
    if isinstance(value, str):
        value = value.strip()
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return fallback
    return parsed if math.isfinite(parsed) else fallback


def first_present(record: dict, keys: Sequence[str]) -> Any:
    # first key whose value is not None, even if it is empty
    for k in keys:
        if record.get(k) is not None:
            return record[k]
    return None


def normalize_category(raw: Any) -> Optional[Category]:
    if not isinstance(raw, dict):
        return None
    cid = number_or(first_present(raw, CATEGORY_ID_KEYS), math.nan)
    if not math.isfinite(cid) or cid <= 0 or not cid.is_integer():
        return None
    name = first_present(raw, CATEGORY_NAME_KEYS)
    name = "" if name is None else str(name)
    if not name:
        return None
    return Category(id=int(cid), name=name)


def normalize_categories(data: Any) -> Tuple[Category, ...]:
    if not isinstance(data, list):
        logger.warning("Category payload is not a list: %r", type(data).__name__)
        return ()
    cats = tuple(c for c in map(normalize_category, data) if c is not None)
    dropped = len(data) - len(cats)
    if dropped:
        logger.warning("Dropped %d malformed category record(s)", dropped)
    return cats


def parse_date(value: Any) -> Optional[pd.Timestamp]:
    ts = pd.to_datetime(value, errors="coerce", utc=True)
    if ts is None or pd.isna(ts):
        return None
    return ts


def normalize_transaction(raw: dict) -> Transaction:
    description = raw.get("description")
    return Transaction(
        transaction_id=first_present(raw, TRANSACTION_ID_KEYS),
        category_id=first_present(raw, ("categoryId", "CategoryId")),
        type=str(raw.get("type") or "").strip().lower(),
        amount=number_or(raw.get("amount"), 0.0),
        date=parse_date(first_present(raw, ("date", "Date"))),
        description="" if description is None else str(description),
    )


def _date_key(t: Transaction) -> float:
    return t.date.value if t.date is not None else -math.inf


def sort_by_date_desc(trans: Iterable[Transaction]) -> Tuple[Transaction, ...]:
    # sorted() stays stable with reverse=True, so equal dates keep fetch order
    return tuple(sorted(trans, key=_date_key, reverse=True))


def normalize_transactions(data: Any) -> Tuple[Transaction, ...]:
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of transactions, got {type(data).__name__}")
    return sort_by_date_desc(normalize_transaction(t) for t in data if isinstance(t, dict))


def normalize_pie_entry(raw: dict) -> PieSlice:
    name = first_present(raw, ("CategoryName", "categoryName"))
    if name is None:
        name = f"Cat {first_present(raw, ('CategoryId', 'categoryId'))}"

    total = first_present(raw, ("Total", "total"))
    value = number_or(total if total is not None else 0, math.nan)
    if math.isnan(value):
        logger.warning("Unparseable pie total %r for %s, using 0", total, name)
        value = 0.0
    return PieSlice(name=str(name), value=value)


def normalize_pie(data: Any) -> Tuple[PieSlice, ...]:
    if data is None:
        return ()
    if not isinstance(data, list):
        logger.warning("Pie payload is not a list: %r", type(data).__name__)
        return ()
    return tuple(normalize_pie_entry(r) for r in data if isinstance(r, dict))
