from dataclasses import dataclass
from typing import Optional

import pandas as pd

INCOME = "income"
EXPENSE = "expense"
TRANSACTION_TYPES = (INCOME, EXPENSE)


@dataclass(frozen=True)
class Category:
    id: int
    name: str


@dataclass(frozen=True)
class Transaction:
    transaction_id: object          # server-assigned, opaque
    category_id: object             # foreign key into Category
    type: str                       # "income" or "expense"
    amount: float                   # always positive, sign comes from type
    date: Optional[pd.Timestamp]    # None when the server date is unparseable
    description: str = ""


# One slice of the category pie, aggregated server-side
@dataclass(frozen=True)
class PieSlice:
    name: str
    value: float


@dataclass(frozen=True)
class NewTransaction:
    category_id: int
    type: str
    amount: float
    description: Optional[str] = None

    def to_payload(self) -> dict:
        payload = {"categoryId": self.category_id, "type": self.type, "amount": self.amount}
        if self.description:
            payload["description"] = self.description
        return payload


# Raw text values of the entry form, as typed by the user
@dataclass(frozen=True)
class TransactionForm:
    category_id: str = ""
    type: str = EXPENSE
    amount: str = ""
    description: str = ""


DEFAULT_CATEGORIES = (
    Category(id=1, name="Housing"),
    Category(id=2, name="Food"),
    Category(id=3, name="Transportation"),
    Category(id=4, name="Entertainment"),
    Category(id=5, name="Others"),
    Category(id=6, name="Income"),
)
