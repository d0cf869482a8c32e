"""
Sample records for demos and first-run setup.

Mirrors the network the console ships with: five leaders, three open orders
and four artisans under leader "1". Seeding upserts, so running it again
restores these records without touching anything else.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, List

from artisan_store.domain.models import Artisan, Leader, Order
from artisan_store.store import RecordStore
from artisan_store.utils.logging import get_logger

log = get_logger(__name__)


def sample_leaders() -> List[Leader]:
    rows = [
        ("1", "Priya Sharma", "+91 98765 43210", 15, 8, "ORD-2024-001", 95, "Jodhpur Village", "toys"),
        ("2", "Rahul Kumar", "+91 87654 32109", 12, 6, "ORD-2024-002", 88, "Udaipur District", "embroidery"),
        ("3", "Meera Singh", "+91 76543 21098", 18, 10, "ORD-2024-003", 92, "Jaisalmer Region", "bags"),
        ("4", "Arjun Patel", "+91 65432 10987", 9, 4, "ORD-2024-004", 78, "Bikaner City", "toys"),
        ("5", "Kavita Agarwal", "+91 54321 09876", 14, 7, "ORD-2024-005", 90, "Ajmer Village", "embroidery"),
    ]
    return [
        Leader.validated(
            id=lid,
            name=name,
            phone=phone,
            number_of_artisans=artisans,
            orders_received=received,
            current_order_id=current,
            performance_score=score,
            location=location,
            order_type=order_type,
        )
        for lid, name, phone, artisans, received, current, score, location, order_type in rows
    ]


def sample_orders() -> List[Order]:
    return [
        Order.validated(
            id="ORD-2024-001",
            type="toys",
            number_of_products=50,
            deadline=date(2024, 12, 31),
            leader_id="1",
            status="active",
            created_at=date(2024, 1, 15),
        ),
        Order.validated(
            id="ORD-2024-002",
            type="embroidery",
            number_of_products=30,
            deadline=date(2024, 12, 25),
            leader_id="2",
            status="pending",
            created_at=date(2024, 1, 20),
        ),
        Order.validated(
            id="ORD-2024-003",
            type="bags",
            number_of_products=25,
            deadline=date(2024, 12, 20),
            leader_id="1",
            status="active",
            created_at=date(2024, 1, 25),
        ),
    ]


def sample_artisans(leader_id: str = "1") -> List[Artisan]:
    rows = [
        ("1", "Rahul Sharma", "great", 45, 5, 2250, ["Toy Painting", "Quality Control"]),
        ("2", "Sunita Devi", "okay", 32, 3, 1600, ["Embroidery", "Pattern Design"]),
        ("3", "Vijay Kumar", "great", 38, 4, 1900, ["Bag Stitching", "Material Cutting"]),
        ("4", "Anita Patel", "worst", 18, 2, 900, ["Basic Stitching"]),
    ]
    return [
        Artisan.validated(
            id=aid,
            name=name,
            leader_id=leader_id,
            performance_metric=metric,
            products_created=products,
            quality_check=checks,
            amount_to_pay=amount,
            skills_added=skills,
        )
        for aid, name, metric, products, checks, amount, skills in rows
    ]


async def seed_store(store: RecordStore) -> Dict[str, int]:
    """
    Upsert the sample records into every collection.

    Returns the number of records written per collection.
    """
    leaders, orders, artisans = sample_leaders(), sample_orders(), sample_artisans()
    await store.leaders.save_all(leaders)
    await store.orders.save_all(orders)
    await store.artisans.save_all(artisans)
    counts = {"leaders": len(leaders), "orders": len(orders), "artisans": len(artisans)}
    log.info("[SEED] sample records written", extra=counts)
    return counts


__all__ = ["sample_artisans", "sample_leaders", "sample_orders", "seed_store"]
