"""Shared fixtures for dynsearch tests."""

from __future__ import annotations

import datetime
from decimal import Decimal
from typing import Any

import pytest

from dynsearch import (
    ArrayType,
    EntitySchema,
    FieldType,
    InMemorySearchExecutor,
    RelationInfo,
    SearchEngine,
    StaticSchemaIntrospector,
    build_default_registry,
)

UTC = datetime.timezone.utc


@pytest.fixture
def introspector() -> StaticSchemaIntrospector:
    return StaticSchemaIntrospector(
        {
            "Order": EntitySchema(
                fields={
                    "id": FieldType.INTEGER,
                    "status": FieldType.STRING,
                    "amount": FieldType.DECIMAL,
                    "paid": FieldType.DECIMAL,
                    "created_at": FieldType.DATETIME,
                    "shipped_on": FieldType.DATE,
                    "tags": ArrayType(FieldType.STRING),
                    "note": FieldType.STRING,
                    "password": FieldType.STRING,
                    "customer_id": FieldType.INTEGER,
                },
                relations={
                    "customer": RelationInfo(
                        "customer", "Customer", ("customer_id",), owning=True
                    ),
                    "items": RelationInfo("items", "Item", ("id",), many=True),
                },
            ),
            "Customer": EntitySchema(
                fields={
                    "id": FieldType.INTEGER,
                    "name": FieldType.STRING,
                    "vip": FieldType.BOOLEAN,
                },
            ),
            "Item": EntitySchema(
                fields={
                    "id": FieldType.INTEGER,
                    "sku": FieldType.STRING,
                    "quantity": FieldType.INTEGER,
                },
            ),
        }
    )


@pytest.fixture
def registry():
    """Default in-memory operator registry."""
    return build_default_registry()


@pytest.fixture
def orders() -> list[dict[str, Any]]:
    ann = {"id": 1, "name": "Ann Lee", "vip": True}
    bob = {"id": 2, "name": "Bob Stone", "vip": False}
    return [
        {
            "id": 1,
            "status": "open",
            "amount": Decimal("120"),
            "paid": Decimal("120"),
            "created_at": datetime.datetime(2024, 1, 5, 10, 0, tzinfo=UTC),
            "tags": ["rush", "gift"],
            "note": "call first",
            "customer": ann,
            "items": [
                {"id": 11, "sku": "A-1", "quantity": 2},
                {"id": 12, "sku": "B-2", "quantity": 1},
            ],
        },
        {
            "id": 2,
            "status": "open",
            "amount": Decimal("600"),
            "paid": Decimal("100"),
            "created_at": datetime.datetime(2024, 2, 10, 8, 30, tzinfo=UTC),
            "tags": ["gift"],
            "note": None,
            "customer": bob,
            "items": [{"id": 21, "sku": "A-1", "quantity": 5}],
        },
        {
            "id": 3,
            "status": "closed",
            "amount": Decimal("300"),
            "paid": Decimal("300"),
            "created_at": datetime.datetime(2024, 3, 15, 23, 30, tzinfo=UTC),
            "tags": [],
            "note": "",
            "customer": ann,
            "items": [],
        },
        {
            "id": 4,
            "status": "cancelled",
            "amount": None,
            "paid": None,
            "created_at": datetime.datetime(2024, 1, 20, 12, 0, tzinfo=UTC),
            "tags": None,
            "note": "leave at door",
            "customer": None,
            "items": [{"id": 41, "sku": "C-3", "quantity": 1}],
        },
    ]


@pytest.fixture
def engine(introspector, registry, orders) -> SearchEngine:
    executor = InMemorySearchExecutor({"Order": orders}, registry)
    return SearchEngine(introspector, executor)
