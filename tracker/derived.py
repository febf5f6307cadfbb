from functools import reduce
from typing import Any, Dict, Iterable

from tracker.domain import INCOME, Category, Transaction
from tracker.functional import lookup_name


def signed_amount(t: Transaction) -> float:
    return t.amount if t.type == INCOME else -t.amount


def budget_total(trans: Iterable[Transaction]) -> float:
    # always a full recompute over the current list
    return reduce(lambda acc, t: acc + signed_amount(t), trans, 0.0)


def category_lookup(cats: Iterable[Category]) -> Dict[str, str]:
    return {str(c.id): c.name for c in cats}


def category_label(lookup: Dict[str, str], category_id: Any) -> str:
    return lookup_name(lookup, category_id).get_or_else(str(category_id))


def format_money(value: float, currency: str) -> str:
    sign = "-" if value < 0 else ""
    return f"{sign}{abs(value):,.2f} {currency}"
