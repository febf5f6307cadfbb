from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from tracker.domain import Category, PieSlice, Transaction, TransactionForm


@dataclass
class ViewState:
    """Everything the transaction screen renders from.

    Owned by a single TransactionManager and only mutated after a request
    completes. `budget` and `category_map` are derived and rebuilt by event
    handlers, never written directly by the services.
    """

    transactions: Tuple[Transaction, ...] = ()
    loading: bool = False
    error: Optional[str] = None
    form: TransactionForm = field(default_factory=TransactionForm)

    pie: Tuple[PieSlice, ...] = ()
    pie_loading: bool = False

    categories: Tuple[Category, ...] = ()
    cat_loading: bool = False

    budget: float = 0.0
    category_map: Dict[str, str] = field(default_factory=dict)
