from datetime import datetime, timedelta, timezone


class FakeClock:
    """Deterministic clock; every call moves one minute forward."""

    def __init__(self, start=datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self):
        now = self.current
        self.current = now + timedelta(minutes=1)
        return now


def order_payload(**overrides):
    payload = {
        "orderNumber": "AM-1001",
        "customerInfo": {"name": "Rahim", "phone": "01700000000", "address": "Dhaka"},
        "items": [{"productId": "p1", "name": "Panjabi", "quantity": 2, "price": 50}],
        "grandTotal": 100,
    }
    payload.update(overrides)
    return payload
