import asyncio
import logging
from typing import Any, Callable, List, Tuple

from tracker.api import ApiClient, ApiError
from tracker.domain import DEFAULT_CATEGORIES, Category, TransactionForm
from tracker.events import CATEGORIES_CHANGED, TRANSACTIONS_CHANGED, EventBus
from tracker.functional import validate_new_transaction
from tracker.state import ViewState
from tracker.transforms import normalize_categories, normalize_pie, normalize_transactions

logger = logging.getLogger(__name__)


def _message(err: Exception, fallback: str) -> str:
    return str(err).strip() or fallback


class CategoryResolver:
    """Loads the spending categories, falling back to the built-in set.

    `load` never raises: every failure ends in DEFAULT_CATEGORIES.
    """

    def __init__(self, api: ApiClient, base_url: str, state: ViewState, bus: EventBus):
        self.api = api
        self.base_url = base_url.rstrip("/")
        self.state = state
        self.bus = bus

    def candidate_urls(self) -> List[str]:
        if self.base_url.endswith("s"):
            return [self.base_url]
        return [self.base_url, self.base_url + "s"]

    async def _fetch_first(self) -> Any:
        for url in self.candidate_urls():
            try:
                return await asyncio.to_thread(self.api.get_json, url)
            except ApiError as e:
                logger.debug("Category endpoint %s failed: %s", url, e)
        return None

    async def load(self) -> Tuple[Category, ...]:
        self.state.cat_loading = True
        try:
            data = await self._fetch_first()
            if data is None:
                logger.warning("Categories fallback (DEFAULT_CATEGORIES): no endpoint answered")
                cats = DEFAULT_CATEGORIES
            else:
                cats = normalize_categories(data)
                if not cats:
                    logger.warning("Categories fallback (DEFAULT_CATEGORIES): no usable records")
                    cats = DEFAULT_CATEGORIES
        finally:
            self.state.cat_loading = False

        self.state.categories = cats
        self.bus.publish(CATEGORIES_CHANGED, {"count": len(cats)})
        return cats


class PieView:
    """Server-side category totals for the chart, refreshed on its own."""

    def __init__(self, api: ApiClient, transactions_url: str, state: ViewState):
        self.api = api
        self.url = transactions_url.rstrip("/") + "/piechart"
        self.state = state

    async def refresh(self) -> None:
        self.state.pie_loading = True
        try:
            data = await asyncio.to_thread(self.api.get_json, self.url)
            self.state.pie = normalize_pie(data)
        except ApiError as e:
            logger.error("/piechart error: %s", e)
            # keep whatever error is already on screen
            if self.state.error is None:
                self.state.error = _message(e, "Could not load the pie chart")
        finally:
            self.state.pie_loading = False


class TransactionStore:
    def __init__(self, api: ApiClient, base_url: str, state: ViewState, bus: EventBus, pie: PieView):
        self.api = api
        self.base_url = base_url.rstrip("/")
        self.state = state
        self.bus = bus
        self.pie = pie

    def _changed(self) -> None:
        self.bus.publish(TRANSACTIONS_CHANGED, {"count": len(self.state.transactions)})

    async def load_all(self) -> None:
        """Replace the list with the server's, newest first."""
        self.state.loading = True
        self.state.error = None
        try:
            data = await asyncio.to_thread(self.api.get_json, self.base_url)
            self.state.transactions = normalize_transactions(data)
            self._changed()
        except (ApiError, ValueError) as e:
            logger.error("Loading transactions failed: %s", e)
            self.state.error = _message(e, "Failed to load transactions")
        finally:
            self.state.loading = False

    async def create(self, category_id: Any, type: str, amount: Any, description: Any = None) -> bool:
        self.state.error = None
        checked = validate_new_transaction(category_id, type, amount, description)
        if not checked.is_right():
            self.state.error = checked.get_error()
            return False

        new = checked.get_or_else(None)
        try:
            await asyncio.to_thread(self.api.post, self.base_url, new.to_payload())
        except ApiError as e:
            logger.error("Creating transaction failed: %s", e)
            self.state.error = _message(e, "Could not create transaction")
            return False

        self.state.form = TransactionForm(type=new.type)
        await asyncio.gather(self.load_all(), self.pie.refresh())
        return True

    async def delete(self, transaction_id: Any, confirm: Callable[[], bool]) -> bool:
        """Delete after the user confirms; drops the row locally on success."""
        if not confirm():
            return False
        try:
            await asyncio.to_thread(self.api.delete, f"{self.base_url}/{transaction_id}")
        except ApiError as e:
            logger.error("Deleting transaction %s failed: %s", transaction_id, e)
            self.state.error = _message(e, "Could not delete transaction")
            return False

        self.state.transactions = tuple(
            t for t in self.state.transactions if t.transaction_id != transaction_id
        )
        self._changed()
        await self.pie.refresh()
        return True
