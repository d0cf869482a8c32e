"""
Domain package for the Artisan Network Store.

Exports the record models persisted by the store together with their enum
domains and small derivation helpers. Keep this package focused on data
definitions and validation concerns.
"""

from artisan_store.domain.models import (
    COLLECTIONS,
    ORDER_STATUSES,
    ORDER_TYPES,
    PERFORMANCE_METRICS,
    PERFORMANCE_RANK,
    Artisan,
    Leader,
    Order,
    Record,
    StoredRecord,
    compute_amount_to_pay,
    resolve_field_name,
    with_changes,
)

__all__ = [
    "Artisan",
    "COLLECTIONS",
    "Leader",
    "ORDER_STATUSES",
    "ORDER_TYPES",
    "Order",
    "PERFORMANCE_METRICS",
    "PERFORMANCE_RANK",
    "Record",
    "StoredRecord",
    "compute_amount_to_pay",
    "resolve_field_name",
    "with_changes",
]
