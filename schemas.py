"""
Request and response schemas for the storefront API

Order documents themselves are kept as plain dicts: customer info and line
items are passed through to the store without being interpreted.
"""
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURNED = "returned"


class StatusUpdate(BaseModel):
    # status stays a plain string so unknown values reach the order validator
    status: Optional[str] = None
    trackingNumber: Optional[str] = None
    returnReason: Optional[str] = None


class OrderCreated(BaseModel):
    message: str
    orderId: str
    orderNumber: Optional[Any] = None


class OrderStats(BaseModel):
    totalOrders: int = 0
    pendingOrders: int = 0
    confirmedOrders: int = 0
    shippedOrders: int = 0
    deliveredOrders: int = 0
    cancelledOrders: int = 0
    returnedOrders: int = 0
    totalRevenue: float = 0


class ProductCreate(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = Field(..., min_length=1)
    price: float = Field(..., gt=0, strict=True)
    category: str = Field(..., min_length=1)


class BannerCreate(BaseModel):
    url: str = Field(..., min_length=1)
    heading: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)


class BannerUpdate(BaseModel):
    url: Optional[str] = None
    heading: Optional[str] = None
    description: Optional[str] = None


class UserUpdate(BaseModel):
    role: Optional[str] = None
    userEmail: Optional[str] = None
    userName: Optional[str] = None


class UserUpsert(BaseModel):
    model_config = ConfigDict(extra="allow")

    # kept verbatim: it is the upsert key and must match the stored value
    email: str = Field(..., min_length=1)
    displayName: Optional[str] = None
    status: Optional[str] = None
