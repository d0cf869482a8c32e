"""
Domain models for the Artisan Network Store.

Defines the three record kinds persisted by the record store. Attributes are
snake_case in Python; the serialized form uses the camelCase keys the console
has always stored (`leaderId`, `performanceMetric`, ...). Both spellings are
accepted on input.

Models are frozen. A changed record is a new, fully validated object built
with `with_changes`.
"""
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Literal, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from artisan_store.errors import RecordValidationError

PerformanceMetric = Literal["worst", "okay", "great"]
OrderType = Literal["toys", "embroidery", "bags"]
OrderStatus = Literal["active", "pending", "dispatched"]

PERFORMANCE_METRICS: tuple[str, ...] = ("worst", "okay", "great")
ORDER_TYPES: tuple[str, ...] = ("toys", "embroidery", "bags")
ORDER_STATUSES: tuple[str, ...] = ("active", "pending", "dispatched")

# Ordinal position on the performance scale.
PERFORMANCE_RANK: Dict[str, int] = {
    metric: rank for rank, metric in enumerate(PERFORMANCE_METRICS, 1)
}

RecordT = TypeVar("RecordT", bound="StoredRecord")


class StoredRecord(BaseModel):
    """
    Common base for persisted records: a flat document keyed by `id`.
    """

    id: str = Field(..., min_length=1, description="Unique key within the collection.")

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    @classmethod
    def validated(
        cls: Type[RecordT], data: Optional[Mapping[str, Any]] = None, **fields: Any
    ) -> RecordT:
        """
        Build a record, raising RecordValidationError on out-of-domain values.
        """
        payload = {**(data or {}), **fields}
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            raise RecordValidationError(
                f"invalid {cls.__name__}: {exc.error_count()} error(s)",
                errors=exc.errors(include_url=False),
            ) from exc

    def to_document(self) -> Dict[str, Any]:
        """JSON-compatible mapping with camelCase keys, as persisted."""
        return self.model_dump(mode="json", by_alias=True)


class Artisan(StoredRecord):
    """
    A craftsperson working under a leader.
    """

    name: str = Field(..., description="Display name.")
    leader_id: str = Field(..., description="Back-reference to a Leader id (not enforced).")
    performance_metric: PerformanceMetric = Field("okay", description="Ordinal rating.")
    products_created: int = Field(0, ge=0, description="Units produced.")
    quality_check: int = Field(0, ge=0, description="Inspections actually carried out.")
    amount_to_pay: Decimal = Field(Decimal("0"), ge=0, description="productsCreated x unit rate.")
    skills_added: List[str] = Field(default_factory=list, description="Free-text skill labels.")


class Order(StoredRecord):
    """
    A production order assigned to a leader.
    """

    type: OrderType = Field(..., description="Product family.")
    number_of_products: int = Field(..., gt=0, description="Units ordered.")
    deadline: date = Field(..., description="Delivery date.")
    leader_id: str = Field(..., description="Back-reference to a Leader id (not enforced).")
    status: OrderStatus = Field("pending", description="Lifecycle state; dispatched is terminal.")
    created_at: date = Field(..., description="Date the order was registered.")


class Leader(StoredRecord):
    """
    A village-level coordinator who receives orders and manages artisans.
    """

    name: str
    phone: str
    number_of_artisans: int = Field(0, ge=0, description="Maintained independently of artisans.")
    orders_received: int = Field(0, ge=0)
    current_order_id: str = Field("", description="Free text, not a foreign key.")
    performance_score: int = Field(0, ge=0, le=100)
    location: str = ""
    order_type: OrderType


Record = Union[Artisan, Order, Leader]

COLLECTIONS: Dict[str, Type[StoredRecord]] = {
    "artisans": Artisan,
    "orders": Order,
    "leaders": Leader,
}


def with_changes(record: RecordT, **changes: Any) -> RecordT:
    """
    Return a copy of `record` with `changes` applied, re-running validation.
    """
    return type(record).validated(record.model_dump(), **changes)


def compute_amount_to_pay(products_created: int, rate_per_product: int) -> Decimal:
    """Payroll rule: a fixed rate per product created."""
    return Decimal(products_created) * Decimal(rate_per_product)


def resolve_field_name(model: Type[BaseModel], field_name: str) -> str:
    """
    Map an attribute name or its camelCase alias to the attribute name.

    Raises ValueError for names the model does not declare.
    """
    if field_name in model.model_fields:
        return field_name
    for name, info in model.model_fields.items():
        if info.alias == field_name:
            return name
    raise ValueError(f"{model.__name__} has no field '{field_name}'")


__all__ = [
    "Artisan",
    "COLLECTIONS",
    "Leader",
    "ORDER_STATUSES",
    "ORDER_TYPES",
    "Order",
    "OrderStatus",
    "OrderType",
    "PERFORMANCE_METRICS",
    "PERFORMANCE_RANK",
    "PerformanceMetric",
    "Record",
    "RecordT",
    "StoredRecord",
    "compute_amount_to_pay",
    "resolve_field_name",
    "with_changes",
]
