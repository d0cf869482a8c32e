"""
Console workflows built on the record store.

These are the read-modify-write sequences the dashboards perform: registering
orders and artisans, dispatching orders, and recording artisan performance.
In-memory filters used by the listing screens live here too, since the store
itself only filters on a single field.

Writes that touch an existing record go through
`CollectionStore.read_modify_write`, so they are serialized per collection.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Iterable, List, Optional, Sequence

from artisan_store.domain.models import (
    Artisan,
    Leader,
    Order,
    compute_amount_to_pay,
    with_changes,
)
from artisan_store.errors import RecordNotFound
from artisan_store.store import RecordStore
from artisan_store.utils.logging import get_logger

log = get_logger(__name__)

DEFAULT_PAY_RATE = 50


def _millis(now: Optional[datetime] = None) -> int:
    moment = now or datetime.now(timezone.utc)
    return int(moment.timestamp() * 1000)


def new_order_id(now: Optional[datetime] = None) -> str:
    """Timestamp-derived order code, `ORD-{unix-millis}`."""
    return f"ORD-{_millis(now)}"


def new_artisan_id(now: Optional[datetime] = None) -> str:
    return f"artisan-{_millis(now)}"


def parse_skills(text: Optional[str]) -> List[str]:
    """Split a comma-separated skills field into trimmed, non-empty labels."""
    if not text:
        return []
    return [part.strip() for part in text.split(",") if part.strip()]


async def create_order(
    store: RecordStore,
    order_type: str,
    number_of_products: int,
    deadline: date,
    leader_id: str,
    today: Optional[date] = None,
    now: Optional[datetime] = None,
) -> Order:
    """
    Register a new pending order.

    Raises
    ------
    RecordValidationError
        For an unknown type or a non-positive product count.
    DuplicateKey
        If the generated id collides with an existing order.
    """
    order = Order.validated(
        id=new_order_id(now),
        type=order_type,
        number_of_products=number_of_products,
        deadline=deadline,
        leader_id=leader_id,
        status="pending",
        created_at=today or date.today(),
    )
    await store.orders.add(order)
    log.info("[ORDER CREATED]", extra={"order_id": order.id, "leader_id": leader_id})
    return order


async def dispatch_order(store: RecordStore, order_id: str) -> Order:
    """
    Move an order to the terminal `dispatched` state.

    Raises
    ------
    RecordNotFound
        If no order has `order_id`.
    """

    def _dispatch(orders: List[Order]) -> List[Order]:
        for order in orders:
            if order.id == order_id:
                return [with_changes(order, status="dispatched")]
        raise RecordNotFound("orders", order_id)

    (dispatched,) = await store.orders.read_modify_write(_dispatch)
    log.info("[ORDER DISPATCHED]", extra={"order_id": order_id})
    return dispatched


async def register_artisan(
    store: RecordStore,
    name: str,
    leader_id: str,
    skills: Iterable[str] = (),
    now: Optional[datetime] = None,
) -> Artisan:
    """Add an artisan under `leader_id` with an `okay` rating and no output yet."""
    artisan = Artisan.validated(
        id=new_artisan_id(now),
        name=name,
        leader_id=leader_id,
        performance_metric="okay",
        products_created=0,
        quality_check=0,
        amount_to_pay=0,
        skills_added=list(skills),
    )
    await store.artisans.add(artisan)
    log.info("[ARTISAN REGISTERED]", extra={"artisan_id": artisan.id, "leader_id": leader_id})
    return artisan


async def record_performance(
    store: RecordStore,
    artisan_id: str,
    performance_metric: str,
    products_created: int,
    quality_check: Optional[int] = None,
    skills: Optional[Sequence[str]] = None,
    rate_per_product: int = DEFAULT_PAY_RATE,
) -> Artisan:
    """
    Update an artisan's rating and output; amount to pay is recomputed.

    Fields left as None keep their stored values.
    """

    def _update(artisans: List[Artisan]) -> List[Artisan]:
        for artisan in artisans:
            if artisan.id != artisan_id:
                continue
            changes = {
                "performance_metric": performance_metric,
                "products_created": products_created,
                "amount_to_pay": compute_amount_to_pay(products_created, rate_per_product),
            }
            if quality_check is not None:
                changes["quality_check"] = quality_check
            if skills is not None:
                changes["skills_added"] = list(skills)
            return [with_changes(artisan, **changes)]
        raise RecordNotFound("artisans", artisan_id)

    (updated,) = await store.artisans.read_modify_write(_update)
    log.info(
        "[ARTISAN UPDATED]",
        extra={"artisan_id": artisan_id, "amount_to_pay": str(updated.amount_to_pay)},
    )
    return updated


def filter_orders(
    orders: Iterable[Order],
    status: Optional[str] = None,
    order_type: Optional[str] = None,
    deadline_before: Optional[date] = None,
) -> List[Order]:
    """Orders matching every given criterion; a deadline bound is inclusive."""
    selected = list(orders)
    if status:
        selected = [o for o in selected if o.status == status]
    if order_type:
        selected = [o for o in selected if o.type == order_type]
    if deadline_before:
        selected = [o for o in selected if o.deadline <= deadline_before]
    return selected


def filter_leaders(
    leaders: Iterable[Leader],
    order_type: Optional[str] = None,
    search: Optional[str] = None,
) -> List[Leader]:
    """Leaders by order type and a case-insensitive name/location search."""
    selected = list(leaders)
    if order_type:
        selected = [leader for leader in selected if leader.order_type == order_type]
    if search:
        needle = search.lower()
        selected = [
            leader
            for leader in selected
            if needle in leader.name.lower() or needle in leader.location.lower()
        ]
    return selected


__all__ = [
    "DEFAULT_PAY_RATE",
    "create_order",
    "dispatch_order",
    "filter_leaders",
    "filter_orders",
    "new_artisan_id",
    "new_order_id",
    "parse_skills",
    "record_performance",
    "register_artisan",
]
