import threading

import pytest

from tracker.domain import DEFAULT_CATEGORIES, TransactionForm
from tracker.manager import TransactionManager
from tests.conftest import FakeResponse, TX_URL, CAT_URL

PIE_URL = TX_URL + "/piechart"

TRANSACTIONS = [
    {"transactionsId": 1, "categoryId": 6, "type": "income", "amount": 1000, "date": "2025-09-01T08:00:00"},
    {"transactionsId": 2, "categoryId": 2, "type": "expense", "amount": 120.5, "date": "2025-09-03T12:00:00"},
    {"transactionsId": 3, "categoryId": 77, "type": "expense", "amount": 79.5, "date": "2025-09-02T09:30:00",
     "description": "bus pass"},
]


@pytest.fixture
def manager(api):
    return TransactionManager(api, TX_URL, CAT_URL)


def serve_all(session, transactions=TRANSACTIONS):
    session.add("GET", TX_URL, FakeResponse(200, transactions))
    session.add("GET", PIE_URL, FakeResponse(200, [{"categoryName": "Food", "total": 120.5}]))
    session.add("GET", CAT_URL, FakeResponse(200, [{"categoryId": 2, "categoryName": "Food"},
                                                  {"categoryId": 6, "categoryName": "Income"}]))


@pytest.mark.asyncio
async def test_mount_loads_everything(manager, session):
    serve_all(session)
    await manager.mount()
    state = manager.state

    assert [t.transaction_id for t in state.transactions] == [2, 3, 1]
    assert state.budget == 800
    assert state.pie[0].name == "Food"
    assert state.category_map == {"2": "Food", "6": "Income"}
    assert state.error is None
    assert not (state.loading or state.pie_loading or state.cat_loading)
    assert sorted(session.urls("GET")) == sorted([TX_URL, PIE_URL, CAT_URL])


@pytest.mark.asyncio
async def test_mount_transaction_error_is_kept_over_pie_error(manager, session):
    session.add("GET", TX_URL, FakeResponse(500, text="transactions down"))
    session.add("GET", PIE_URL, FakeResponse(500, text="pie down"))
    await manager.mount()
    assert manager.state.error == "transactions down"
    assert manager.state.transactions == ()
    assert manager.state.categories == DEFAULT_CATEGORIES
    assert manager.state.category_map["1"] == "Housing"


@pytest.mark.asyncio
async def test_load_error_with_empty_body(manager, session):
    session.add("GET", TX_URL, FakeResponse(502, text=""))
    await manager.refresh_transactions()
    assert manager.state.error == "Failed to load transactions"


@pytest.mark.asyncio
async def test_create_success_resets_form_and_refreshes(manager, session):
    serve_all(session)
    session.add("POST", TX_URL, FakeResponse(201, {"transactionsId": 4}))
    manager.update_form(category_id="3", type="expense", amount="42.50", description="lunch")

    assert await manager.submit() is True

    post = [c for c in session.calls if c["method"] == "POST"][0]
    assert post["json"] == {"categoryId": 3, "type": "expense", "amount": 42.5, "description": "lunch"}
    assert manager.state.form == TransactionForm(category_id="", type="expense", amount="", description="")
    after_post = session.urls()[session.calls.index(post) + 1:]
    assert sorted(after_post) == sorted([TX_URL, PIE_URL])
    assert manager.state.budget == 800


@pytest.mark.asyncio
async def test_create_keeps_income_type(manager, session):
    serve_all(session)
    session.add("POST", TX_URL, FakeResponse(200, {}))
    assert await manager.store.create(6, "income", 10, "") is True
    assert manager.state.form.type == "income"
    post = [c for c in session.calls if c["method"] == "POST"][0]
    assert "description" not in post["json"]


@pytest.mark.asyncio
@pytest.mark.parametrize("category_id, amount, message", [
    ("0", "10", "Select a valid category"),
    ("", "10", "Select a valid category"),
    ("2", "abc", "Enter a valid amount (> 0)"),
    ("2", "-4", "Enter a valid amount (> 0)"),
])
async def test_create_validation_never_hits_network(manager, session, category_id, amount, message):
    manager.update_form(category_id=category_id, amount=amount)
    assert await manager.submit() is False
    assert manager.state.error == message
    assert session.calls == []
    assert manager.state.form.amount == amount


@pytest.mark.asyncio
async def test_create_failure_shows_server_text(manager, session):
    session.add("POST", TX_URL, FakeResponse(400, text="Category does not exist"))
    manager.update_form(category_id="9", amount="5")
    assert await manager.submit() is False
    assert manager.state.error == "Category does not exist"
    assert manager.state.form.category_id == "9"
    assert session.urls() == [TX_URL]


@pytest.mark.asyncio
async def test_delete_requires_confirmation(manager, session):
    serve_all(session)
    await manager.mount()
    session.calls.clear()

    assert await manager.delete(2, confirm=lambda: False) is False
    assert len(manager.state.transactions) == 3
    assert session.calls == []


@pytest.mark.asyncio
async def test_delete_removes_locally_and_refreshes_pie(manager, session):
    serve_all(session)
    await manager.mount()
    session.calls.clear()
    session.add("DELETE", f"{TX_URL}/2", FakeResponse(204, text=""))

    assert await manager.delete(2, confirm=lambda: True) is True
    assert [t.transaction_id for t in manager.state.transactions] == [3, 1]
    assert manager.state.budget == 920.5
    assert session.urls() == [f"{TX_URL}/2", PIE_URL]


@pytest.mark.asyncio
async def test_delete_failure_leaves_list(manager, session):
    serve_all(session)
    await manager.mount()
    session.add("DELETE", f"{TX_URL}/1", FakeResponse(500, text=""))

    assert await manager.delete(1, confirm=lambda: True) is False
    assert manager.state.error == "Could not delete transaction"
    assert len(manager.state.transactions) == 3
    assert manager.state.budget == 800


@pytest.mark.asyncio
async def test_mount_survives_scalar_pie_payload(manager, session):
    serve_all(session)
    session.add("GET", PIE_URL, FakeResponse(200, 5))
    await manager.mount()
    assert manager.state.pie == ()
    assert manager.state.error is None
    assert len(manager.state.transactions) == 3


@pytest.mark.asyncio
async def test_mount_requests_overlap_with_flags_set(manager, session):
    state = manager.state
    barrier = threading.Barrier(3, timeout=5)
    seen = {}

    def waiting(flag, body):
        def route():
            seen[flag] = getattr(state, flag)
            # only passes if all three requests are in flight together
            barrier.wait()
            return FakeResponse(200, body)
        return route

    session.add("GET", TX_URL, waiting("loading", TRANSACTIONS))
    session.add("GET", PIE_URL, waiting("pie_loading", []))
    session.add("GET", CAT_URL, waiting("cat_loading", [{"id": 1, "name": "Food"}]))

    await manager.mount()

    assert seen == {"loading": True, "pie_loading": True, "cat_loading": True}
    assert not (state.loading or state.pie_loading or state.cat_loading)
    assert state.budget == 800


@pytest.mark.asyncio
async def test_create_follow_up_refreshes_run_together(manager, session):
    state = manager.state
    barrier = threading.Barrier(2, timeout=5)
    seen = {}

    def waiting(flag, body):
        def route():
            seen[flag] = getattr(state, flag)
            barrier.wait()
            return FakeResponse(200, body)
        return route

    session.add("POST", TX_URL, FakeResponse(201, {}))
    session.add("GET", TX_URL, waiting("loading", TRANSACTIONS))
    session.add("GET", PIE_URL, waiting("pie_loading", []))

    assert await manager.store.create(3, "expense", "42.50", "") is True
    assert seen == {"loading": True, "pie_loading": True}
    assert not (state.loading or state.pie_loading)
