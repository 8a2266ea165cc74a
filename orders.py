"""
Order validation and lifecycle.

Any order may be moved to any of the known statuses; there is no
predecessor check. Each transition stamps the timestamp that belongs to the
target status and, for shipped/returned, the optional metadata that came
with the request.
"""
import math
from datetime import datetime, timezone
from numbers import Number
from typing import Any, Callable, Dict, List, Optional

import pymongo

from database import MongoStore, parse_object_id
from errors import NotFoundError, ValidationError
from logging_setup import get_logger
from schemas import OrderStatus

logger = get_logger(__name__)

ORDER_STATUSES = [s.value for s in OrderStatus]

STATUS_TIMESTAMPS = {
    OrderStatus.SHIPPED.value: "shippedAt",
    OrderStatus.DELIVERED.value: "deliveredAt",
    OrderStatus.RETURNED.value: "returnedAt",
    OrderStatus.CANCELLED.value: "cancelledAt",
}

# Fields only a transition may write
TRANSITION_FIELDS = set(STATUS_TIMESTAMPS.values()) | {"trackingNumber", "returnReason"}

NEWEST_FIRST = [("createdAt", pymongo.DESCENDING)]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def validate_new_order(payload: Any) -> None:
    if not isinstance(payload, dict):
        raise ValidationError("Order payload must be an object")
    items = payload.get("items")
    if not payload.get("customerInfo") or not isinstance(items, list) or not items:
        raise ValidationError("Missing required fields: customerInfo and items are required")
    total = payload.get("grandTotal")
    if isinstance(total, bool) or not isinstance(total, Number) or not math.isfinite(total) or not total > 0:
        raise ValidationError("Invalid grand total")


def validate_status(status: Optional[str]) -> str:
    if not status or status not in ORDER_STATUSES:
        raise ValidationError("Invalid status. Must be one of: " + ", ".join(ORDER_STATUSES))
    return status


def build_transition_patch(
    status: str,
    now: datetime,
    tracking_number: Optional[str] = None,
    return_reason: Optional[str] = None,
) -> Dict[str, Any]:
    """Return the $set fields for moving an order to ``status`` at ``now``."""
    patch: Dict[str, Any] = {"status": status, "updatedAt": now}
    stamp = STATUS_TIMESTAMPS.get(status)
    if stamp:
        patch[stamp] = now
    if status == OrderStatus.SHIPPED.value and tracking_number:
        patch["trackingNumber"] = tracking_number
    if status == OrderStatus.RETURNED.value and return_reason:
        patch["returnReason"] = return_reason
    return patch


class OrderService:
    def __init__(self, store: MongoStore, clock: Callable[[], datetime] = utcnow):
        self.store = store
        self.clock = clock

    def create_order(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        validate_new_order(payload)
        now = self.clock()
        doc = {k: v for k, v in payload.items() if k != "_id" and k not in TRANSITION_FIELDS}
        doc.update({"status": OrderStatus.PENDING.value, "createdAt": now, "updatedAt": now})
        result = self.store.insert(doc)
        order_id = str(result.inserted_id)
        logger.info("order created", order_id=order_id, order_number=payload.get("orderNumber"))
        return {"orderId": order_id, "orderNumber": payload.get("orderNumber")}

    def get_order(self, order_id: str) -> dict:
        oid = parse_object_id(order_id, "order")
        order = self.store.find_by_id(oid)
        if not order:
            raise NotFoundError("Order not found")
        return order

    def list_orders(self, status: Optional[str] = None, customer_phone: Optional[str] = None) -> List[dict]:
        query: Dict[str, Any] = {}
        if status:
            query["status"] = status
        if customer_phone:
            query["customerInfo.phone"] = customer_phone
        return self.store.find(query, sort=NEWEST_FIRST)

    def list_orders_by_customer_phone(self, phone: str) -> List[dict]:
        return self.store.find({"customerInfo.phone": phone}, sort=NEWEST_FIRST)

    def transition_order(
        self,
        order_id: str,
        status: Optional[str],
        tracking_number: Optional[str] = None,
        return_reason: Optional[str] = None,
    ):
        oid = parse_object_id(order_id, "order")
        status = validate_status(status)
        patch = build_transition_patch(status, self.clock(), tracking_number, return_reason)
        result = self.store.update_by_id(oid, patch)
        if result.matched_count == 0:
            raise NotFoundError("Order not found")
        logger.info("order status updated", order_id=order_id, status=status)
        return result

    def delete_order(self, order_id: str) -> None:
        oid = parse_object_id(order_id, "order")
        result = self.store.delete_by_id(oid)
        if result.deleted_count == 0:
            raise NotFoundError("Order not found")
        logger.info("order deleted", order_id=order_id)
