"""
Integration tests for SQLAlchemy-backed searches on aiosqlite.

Covers:
- Filters, relation joins and pagination through SQLAlchemySearchRepository
- Distinct counting over to-many joins
- Datetime bounds in the caller's timezone
- Preloading with selectinload and loading relations after the fetch
- Streaming with yield_per
- Driver errors wrapped in SearchExecutionError
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import AsyncGenerator

import pytest
from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, inspect
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from dynsearch import (
    Pagination,
    SearchEngine,
    SearchParams,
    SearchSettings,
    UnknownFieldError,
    UnknownRelationError,
)
from dynsearch_sqlalchemy import (
    SearchExecutionError,
    SQLAlchemyIntrospector,
    SQLAlchemySearchExecutor,
    SQLAlchemySearchRepository,
)

# ---------------------------------------------------------------------------
# Test models
# ---------------------------------------------------------------------------


class Base(DeclarativeBase):
    pass


class CustomerModel(Base):
    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    vip: Mapped[bool] = mapped_column(Boolean, default=False)
    orders: Mapped[list[OrderModel]] = relationship(back_populates="customer")


class OrderModel(Base):
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    status: Mapped[str] = mapped_column(String(20))
    amount: Mapped[int | None] = mapped_column(Integer, nullable=True)
    paid: Mapped[int | None] = mapped_column(Integer, nullable=True)
    note: Mapped[str | None] = mapped_column(String(200), nullable=True)
    password: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime.datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    customer_id: Mapped[int | None] = mapped_column(
        ForeignKey("customers.id"), nullable=True
    )
    customer: Mapped[CustomerModel | None] = relationship(back_populates="orders")
    items: Mapped[list[ItemModel]] = relationship(back_populates="order")


class ItemModel(Base):
    __tablename__ = "items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    sku: Mapped[str] = mapped_column(String(20))
    quantity: Mapped[int] = mapped_column(Integer)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id"))
    order: Mapped[OrderModel] = relationship(back_populates="items")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
async def engine():
    eng = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
async def session(engine) -> AsyncGenerator[AsyncSession, None]:
    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as sess:
        _seed(sess)
        await sess.commit()
        yield sess


@pytest.fixture
def orders(session) -> SQLAlchemySearchRepository[OrderModel]:
    return SQLAlchemySearchRepository(OrderModel, session)


def _utc(*parts: int) -> datetime.datetime:
    return datetime.datetime(*parts, tzinfo=datetime.timezone.utc)


def _seed(session: AsyncSession) -> None:
    ann = CustomerModel(id=1, name="Ann Lee", vip=True)
    bob = CustomerModel(id=2, name="Bob Stone", vip=False)
    session.add_all(
        [
            ann,
            bob,
            OrderModel(
                id=1,
                status="open",
                amount=120,
                paid=120,
                note="call first",
                password="secret",
                created_at=_utc(2024, 1, 1, 10, 5, 59),
                customer=ann,
                items=[
                    ItemModel(id=11, sku="A-1", quantity=2),
                    ItemModel(id=12, sku="B-2", quantity=1),
                ],
            ),
            OrderModel(
                id=2,
                status="open",
                amount=600,
                paid=100,
                created_at=_utc(2024, 1, 1, 10, 6),
                note=None,
                customer=bob,
                items=[ItemModel(id=21, sku="A-1", quantity=5)],
            ),
            OrderModel(
                id=3,
                status="closed",
                amount=300,
                paid=300,
                note="",
                created_at=_utc(2023, 12, 31, 23, 0),
                customer=ann,
            ),
            OrderModel(
                id=4,
                status="cancelled",
                amount=None,
                paid=None,
                note="leave at door",
                items=[ItemModel(id=41, sku="C-3", quantity=1)],
            ),
        ]
    )


def _ids(page) -> list[int]:
    return [order.id for order in page.entries]


# ---------------------------------------------------------------------------
# Tests: filtering and pagination
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_status_and_amount_range(orders):
    page = await orders.search(
        {"status": "open", "amount": [100, 500, "range"]},
        pagination=Pagination(page=1, per_page=10),
    )
    assert _ids(page) == [1]
    assert page.total_entries == 1
    assert (page.page_number, page.page_size, page.total_pages) == (1, 10, 1)


@pytest.mark.asyncio
async def test_no_filters_returns_everything_unpaged(orders):
    page = await orders.search()
    assert _ids(page) == [1, 2, 3, 4]
    assert (page.page_number, page.page_size, page.total_pages) == (1, 4, 1)


@pytest.mark.asyncio
async def test_pages_partition_the_result(orders):
    seen: list[int] = []
    for number in (1, 2, 3):
        page = await orders.search(pagination=Pagination(page=number, per_page=3))
        assert page.total_entries == 4
        assert page.total_pages == 2
        seen.extend(_ids(page))
    assert seen == [1, 2, 3, 4]


@pytest.mark.asyncio
async def test_before_equal_covers_the_whole_minute(orders):
    page = await orders.search({"created_at": ["2024-01-01T10:05", "before_equal"]})
    assert _ids(page) == [1, 3]


@pytest.mark.asyncio
async def test_naive_bounds_are_read_in_the_callers_timezone(orders):
    # Athens is UTC+2 in January: 12:05 local is 10:05 UTC
    page = await orders.search(
        {"created_at": ["2024-01-01T12:05", "before_equal"]},
        timezone="Europe/Athens",
    )
    assert _ids(page) == [1, 3]
    after = await orders.search(
        {"created_at": ["2024-01-01", "after_equal"]}, timezone="Europe/Athens"
    )
    # local midnight is 22:00 UTC on Dec 31
    assert _ids(after) == [1, 2, 3]


@pytest.mark.asyncio
async def test_blank_date_bound_does_not_filter(orders):
    page = await orders.search({"created_at": ["", "before_equal"]})
    assert _ids(page) == [1, 2, 3, 4]


@pytest.mark.asyncio
async def test_substring_match_is_case_insensitive(orders):
    page = await orders.search({"note": "DOOR"})
    assert _ids(page) == [4]


@pytest.mark.asyncio
async def test_range_and_not_range_are_complementary(orders):
    inside = await orders.search({"amount": [100, 300, "range"]})
    outside = await orders.search({"amount": [100, 300, "not_range"]})
    assert _ids(inside) == [1, 3]
    assert _ids(outside) == [2]


@pytest.mark.asyncio
async def test_exact_not(orders):
    page = await orders.search({"status": ["open", "exact_not"]})
    assert _ids(page) == [3, 4]


@pytest.mark.asyncio
async def test_emptiness_on_text_column(orders):
    empty = await orders.search({"note": ["empty"]})
    not_empty = await orders.search({"note": ["not_empty"]})
    assert _ids(empty) == [2, 3]
    assert _ids(not_empty) == [1, 3, 4]


@pytest.mark.asyncio
async def test_fields_diff(orders):
    page = await orders.search({"_fields_diff": ["amount", "paid", 0, "after"]})
    assert _ids(page) == [2]


@pytest.mark.asyncio
async def test_fields_sum_range(orders):
    page = await orders.search(
        {"_fields_sum": ["amount", "paid", 500, 800, "range"]}
    )
    assert _ids(page) == [2, 3]


@pytest.mark.asyncio
async def test_unparseable_value_matches_nothing(orders):
    page = await orders.search({"id": "abc"})
    assert page.entries == []
    assert page.total_entries == 0


@pytest.mark.asyncio
async def test_sensitive_fields_are_ignored(orders):
    page = await orders.search({"password": "nope"})
    assert _ids(page) == [1, 2, 3, 4]


@pytest.mark.asyncio
async def test_use_or(orders):
    page = await orders.search({"status": "closed", "note": "door"}, use_or=True)
    assert _ids(page) == [3, 4]


@pytest.mark.asyncio
async def test_search_params(orders):
    params = SearchParams.from_query_params(
        {"status": "open", "per_page": "1", "page": "2", "order_by": "id"}
    )
    page = await orders.search_params(params)
    assert _ids(page) == [2]
    assert page.total_pages == 2


@pytest.mark.asyncio
async def test_unknown_field(orders):
    with pytest.raises(UnknownFieldError):
        await orders.search({"stauts": "open"})


# ---------------------------------------------------------------------------
# Tests: relations
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_relation_filter_is_an_inner_join(orders):
    page = await orders.search({"name@customer": "ann"})
    assert _ids(page) == [1, 3]


@pytest.mark.asyncio
async def test_relation_boolean_filter(orders):
    page = await orders.search({"vip@customer": "false"})
    assert _ids(page) == [2]


@pytest.mark.asyncio
async def test_relation_referenced_twice_is_joined_once(orders):
    plan = orders.compile({"name@customer": "ann", "vip@customer": "true"})
    assert list(plan.joins) == ["customer"]
    page = await orders.search({"name@customer": "ann", "vip@customer": "true"})
    assert _ids(page) == [1, 3]


@pytest.mark.asyncio
async def test_absent_relation_value_does_not_join(orders):
    plan = orders.compile({"name@customer": ""})
    assert len(plan.joins) == 0
    page = await orders.search({"name@customer": ""})
    assert _ids(page) == [1, 2, 3, 4]


@pytest.mark.asyncio
async def test_to_many_join_and_distinct_count(orders):
    filters = {"quantity@items": [1, "after_equal"]}
    repeated = await orders.search(filters)
    unique = await orders.search(filters, distinct=True)
    assert repeated.total_entries == 4
    assert _ids(repeated) == [1, 1, 2, 4]
    assert _ids(unique) == [1, 2, 4]
    assert unique.total_entries == 3


@pytest.mark.asyncio
async def test_multi_or_across_relations(orders):
    page = await orders.search(
        {
            "_multi_or": [
                {"sku@items": "C-3"},
                {"sku@items": "A-1", "quantity@items": [3, "after"]},
            ]
        }
    )
    assert _ids(page) == [2, 4]


@pytest.mark.asyncio
async def test_order_by_relation(orders):
    page = await orders.search(order_by=[("name@customer", "desc"), ("id", "asc")])
    assert _ids(page) == [2, 1, 3]


@pytest.mark.asyncio
async def test_unknown_relation(orders):
    with pytest.raises(UnknownRelationError):
        await orders.search({"name@owner": "ann"})


# ---------------------------------------------------------------------------
# Tests: preload
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_preload_true_loads_has_many(orders):
    page = await orders.search({"id": 1}, preload=True)
    (order,) = page.entries
    assert sorted(item.sku for item in order.items) == ["A-1", "B-2"]


@pytest.mark.asyncio
async def test_preload_true_recurses(session):
    customers = SQLAlchemySearchRepository(CustomerModel, session)
    page = await customers.search({"id": 1}, preload=True)
    (customer,) = page.entries
    assert sorted(order.id for order in customer.orders) == [1, 3]
    first = next(order for order in customer.orders if order.id == 1)
    assert len(first.items) == 2


@pytest.mark.asyncio
async def test_preload_named_relations(orders):
    page = await orders.search({"id": 2}, preload=["customer", "items"])
    (order,) = page.entries
    assert order.customer.name == "Bob Stone"
    assert [item.sku for item in order.items] == ["A-1"]


@pytest.mark.asyncio
async def test_preload_dotted_path(session):
    customers = SQLAlchemySearchRepository(CustomerModel, session)
    page = await customers.search({"id": 2}, preload=["orders.items"])
    (customer,) = page.entries
    assert [item.quantity for item in customer.orders[0].items] == [5]


@pytest.mark.asyncio
async def test_preload_unknown_relation(orders):
    with pytest.raises(UnknownRelationError):
        await orders.search({"id": 1}, preload=["lines"])


@pytest.mark.asyncio
async def test_ensure_loaded_fills_missing_relations(session, orders):
    session.expunge_all()
    order = (await orders.search({"id": 1})).entries[0]
    assert {"customer", "items"} <= inspect(order).unloaded

    await orders.ensure_loaded(order, ["items"])
    assert "items" not in inspect(order).unloaded
    assert "customer" in inspect(order).unloaded
    assert sorted(item.sku for item in order.items) == ["A-1", "B-2"]

    await orders.ensure_loaded(order)
    assert order.customer.name == "Ann Lee"


@pytest.mark.asyncio
async def test_ensure_loaded_unknown_relation(orders):
    order = (await orders.search({"id": 1})).entries[0]
    with pytest.raises(UnknownRelationError):
        await orders.ensure_loaded(order, ["lines"])


# ---------------------------------------------------------------------------
# Tests: streaming
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_stream_yields_every_match(orders):
    collected = [
        order.id async for order in orders.stream({"status": "open"}, batch_size=1)
    ]
    assert collected == [1, 2]


@pytest.mark.asyncio
async def test_stream_respects_ordering(orders):
    collected = [
        order.id
        async for order in orders.stream(order_by="amount", order_direction="desc")
    ]
    assert collected[:3] == [2, 3, 1]


# ---------------------------------------------------------------------------
# Tests: engine wiring and errors
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_search_engine_with_sqlalchemy_executor(session):
    engine = SearchEngine(
        SQLAlchemyIntrospector(),
        SQLAlchemySearchExecutor(session),
        SearchSettings().with_max_per_page(2),
    )
    page = await engine.search(OrderModel, {}, pagination=Pagination(1, 100))
    assert _ids(page) == [1, 2]
    assert page.page_size == 2
    assert page.total_pages == 2


class _FailingSession:
    async def scalar(self, statement):
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))


@pytest.mark.asyncio
async def test_driver_errors_are_wrapped(caplog):
    session = _FailingSession()
    repo = SQLAlchemySearchRepository(OrderModel, session)  # type: ignore[arg-type]
    with caplog.at_level(logging.ERROR, logger="dynsearch_sqlalchemy.executor"):
        with pytest.raises(SearchExecutionError) as exc_info:
            await repo.search({"status": "open"})
    assert exc_info.value.entity_name == "OrderModel"
    assert isinstance(exc_info.value.cause, OperationalError)
    assert exc_info.value.to_dict()["error"] == "SEARCH_EXECUTION_ERROR"
    assert "Search on OrderModel failed" in caplog.text
