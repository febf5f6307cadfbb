import asyncio
import logging
from dataclasses import replace
from typing import Any, Callable

from tracker.api import ApiClient
from tracker.derived import budget_total, category_lookup
from tracker.events import CATEGORIES_CHANGED, TRANSACTIONS_CHANGED, Event, EventBus
from tracker.services import CategoryResolver, PieView, TransactionStore
from tracker.state import ViewState

logger = logging.getLogger(__name__)


class TransactionManager:
    """View-state coordinator behind the transaction screen.

    Owns one ViewState, wires the three services to it and keeps the derived
    budget and category lookup in sync through the event bus.
    """

    def __init__(self, api: ApiClient, transactions_url: str, categories_url: str):
        self.state = ViewState()
        self.bus = EventBus()
        self.pie = PieView(api, transactions_url, self.state)
        self.store = TransactionStore(api, transactions_url, self.state, self.bus, self.pie)
        self.categories = CategoryResolver(api, categories_url, self.state, self.bus)

        self.bus.subscribe(TRANSACTIONS_CHANGED, self._recompute_budget)
        self.bus.subscribe(CATEGORIES_CHANGED, self._recompute_category_map)

    def _recompute_budget(self, event: Event, payload: dict) -> None:
        self.state.budget = budget_total(self.state.transactions)

    def _recompute_category_map(self, event: Event, payload: dict) -> None:
        self.state.category_map = category_lookup(self.state.categories)

    async def mount(self) -> None:
        """Initial load: transactions, pie and categories, all at once."""
        logger.info("Loading transactions, pie chart and categories")
        await asyncio.gather(
            self.store.load_all(),
            self.pie.refresh(),
            self.categories.load(),
        )

    def update_form(self, **changes: Any) -> None:
        self.state.form = replace(self.state.form, **changes)

    async def submit(self) -> bool:
        form = self.state.form
        return await self.store.create(form.category_id, form.type, form.amount, form.description)

    async def delete(self, transaction_id: Any, confirm: Callable[[], bool]) -> bool:
        return await self.store.delete(transaction_id, confirm)

    async def refresh_transactions(self) -> None:
        await self.store.load_all()

    async def refresh_pie(self) -> None:
        await self.pie.refresh()
