from database import MongoStore
from orders import ORDER_STATUSES
from schemas import OrderStats, OrderStatus

# One pass over the collection: a count per status and the summed grand total.
STATUS_TOTALS_PIPELINE = [
    {"$group": {"_id": "$status", "count": {"$sum": 1}, "revenue": {"$sum": "$grandTotal"}}},
]


def compute_stats(store: MongoStore) -> OrderStats:
    """Per-status counts and delivered revenue derived from the stored orders.

    ``totalOrders`` also counts orders whose status is outside the known set.
    """
    rows = store.aggregate(STATUS_TOTALS_PIPELINE)
    counts = {status: 0 for status in ORDER_STATUSES}
    total_orders = 0
    revenue = 0
    for row in rows:
        status = row["_id"]
        total_orders += row["count"]
        if isinstance(status, str) and status in counts:
            counts[status] = row["count"]
        if status == OrderStatus.DELIVERED.value:
            revenue = row.get("revenue") or 0
    return OrderStats(
        totalOrders=total_orders,
        totalRevenue=revenue,
        **{f"{status}Orders": count for status, count in counts.items()},
    )
