from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from artisan_store.domain.models import (
    Artisan,
    Leader,
    Order,
    compute_amount_to_pay,
    resolve_field_name,
    with_changes,
)
from artisan_store.errors import RecordValidationError

MAX_SCORE = 100


def test_document_uses_camel_case_keys(make_order) -> None:
    document = make_order().to_document()

    assert document == {
        "id": "ORD-2024-001",
        "type": "toys",
        "numberOfProducts": 50,
        "deadline": "2024-12-31",
        "leaderId": "1",
        "status": "active",
        "createdAt": "2024-01-15",
    }


def test_document_round_trips_through_validation(make_artisan) -> None:
    artisan = make_artisan()

    assert Artisan.model_validate(artisan.to_document()) == artisan


def test_artisan_defaults() -> None:
    artisan = Artisan.validated(id="a", name="Anita", leader_id="4")

    assert artisan.performance_metric == "okay"
    assert artisan.products_created == 0
    assert artisan.amount_to_pay == Decimal("0")
    assert artisan.skills_added == []


@pytest.mark.parametrize(
    "overrides",
    [
        {"performance_metric": "excellent"},
        {"products_created": -1},
        {"quality_check": -2},
        {"amount_to_pay": -5},
        {"id": ""},
    ],
)
def test_artisan_rejects_out_of_domain_values(make_artisan, overrides) -> None:
    with pytest.raises(RecordValidationError) as excinfo:
        make_artisan(**overrides)

    assert excinfo.value.errors
    assert isinstance(excinfo.value, ValueError)


@pytest.mark.parametrize(
    "overrides",
    [
        {"type": "furniture"},
        {"number_of_products": 0},
        {"status": "shipped"},
        {"deadline": "not a date"},
    ],
)
def test_order_rejects_out_of_domain_values(make_order, overrides) -> None:
    with pytest.raises(RecordValidationError):
        make_order(**overrides)


def test_leader_score_is_bounded(make_leader) -> None:
    assert make_leader(performance_score=MAX_SCORE).performance_score == MAX_SCORE
    with pytest.raises(RecordValidationError):
        make_leader(performance_score=MAX_SCORE + 1)


def test_records_are_frozen(make_leader) -> None:
    leader = make_leader()

    with pytest.raises(ValidationError):
        leader.name = "Someone Else"


def test_with_changes_validates_the_new_record(make_order) -> None:
    order = make_order(status="pending")

    dispatched = with_changes(order, status="dispatched")

    assert dispatched.status == "dispatched"
    assert order.status == "pending"
    with pytest.raises(RecordValidationError):
        with_changes(order, number_of_products=0)


def test_order_accepts_iso_date_strings() -> None:
    order = Order.validated(
        {
            "id": "ORD-1",
            "type": "bags",
            "numberOfProducts": 25,
            "deadline": "2024-12-20",
            "leaderId": "1",
            "createdAt": "2024-01-25",
        }
    )

    assert order.deadline == date(2024, 12, 20)
    assert order.status == "pending"


def test_compute_amount_to_pay() -> None:
    assert compute_amount_to_pay(45, 50) == Decimal("2250")
    assert compute_amount_to_pay(0, 50) == Decimal("0")


def test_resolve_field_name_accepts_attribute_and_key() -> None:
    assert resolve_field_name(Leader, "order_type") == "order_type"
    assert resolve_field_name(Leader, "orderType") == "order_type"
    with pytest.raises(ValueError):
        resolve_field_name(Leader, "colour")
