import os
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.database import Database
from pymongo.errors import PyMongoError

import database
from banners import BannerService
from catalog import ProductService
from config import Settings, get_settings
from database import BANNERS, ORDERS, PRODUCTS, USERS, insert_result, serialize_doc, store_for, update_result
from errors import ApiError, StoreError
from logging_setup import configure_logging, get_logger
from orders import OrderService
from schemas import (
    BannerCreate,
    BannerUpdate,
    OrderCreated,
    OrderStats,
    ProductCreate,
    StatusUpdate,
    UserUpdate,
    UserUpsert,
)
from stats import compute_stats
from users import UserService

logger = get_logger(__name__)

router = APIRouter()


# Dependencies
def get_db(request: Request) -> Database:
    return request.app.state.db


def get_order_service(db: Database = Depends(get_db)) -> OrderService:
    return OrderService(store_for(db, ORDERS, "order"))


def get_product_service(db: Database = Depends(get_db)) -> ProductService:
    return ProductService(store_for(db, PRODUCTS, "product"))


def get_user_service(db: Database = Depends(get_db)) -> UserService:
    return UserService(store_for(db, USERS, "user"))


def get_banner_service(db: Database = Depends(get_db)) -> BannerService:
    return BannerService(store_for(db, BANNERS, "banner"))


# Orders
@router.post("/orders", status_code=201, response_model=OrderCreated)
def create_order(payload: Dict[str, Any] = Body(...), orders: OrderService = Depends(get_order_service)):
    created = orders.create_order(payload)
    return OrderCreated(message="Order created successfully", **created)


@router.get("/orders")
def list_orders(
    status: Optional[str] = None,
    customerPhone: Optional[str] = None,
    orders: OrderService = Depends(get_order_service),
):
    return [serialize_doc(o) for o in orders.list_orders(status=status, customer_phone=customerPhone)]


@router.get("/orders/customer/{phone}")
def customer_orders(phone: str, orders: OrderService = Depends(get_order_service)):
    return [serialize_doc(o) for o in orders.list_orders_by_customer_phone(phone)]


@router.get("/orders/{order_id}")
def get_order(order_id: str, orders: OrderService = Depends(get_order_service)):
    return serialize_doc(orders.get_order(order_id))


@router.patch("/orders/{order_id}")
def update_order_status(order_id: str, body: StatusUpdate, orders: OrderService = Depends(get_order_service)):
    result = orders.transition_order(order_id, body.status, body.trackingNumber, body.returnReason)
    return {"message": f"Order status updated to {body.status} successfully", "result": update_result(result)}


@router.delete("/orders/{order_id}")
def delete_order(order_id: str, orders: OrderService = Depends(get_order_service)):
    orders.delete_order(order_id)
    return {"message": "Order deleted successfully"}


@router.get("/orders-stats", response_model=OrderStats)
def order_stats(db: Database = Depends(get_db)):
    return compute_stats(store_for(db, ORDERS, "order"))


# Products
@router.get("/products")
def list_products(products: ProductService = Depends(get_product_service)):
    return [serialize_doc(p) for p in products.list_products()]


@router.get("/products/search")
def search_products(q: Optional[str] = None, products: ProductService = Depends(get_product_service)):
    return [serialize_doc(p) for p in products.search_products(q)]


@router.get("/products/{product_id}")
def get_product(product_id: str, products: ProductService = Depends(get_product_service)):
    return serialize_doc(products.get_product(product_id))


@router.post("/products", status_code=201)
def create_product(body: ProductCreate, products: ProductService = Depends(get_product_service)):
    product_id = products.create_product(body)
    return {"message": "Product created successfully", "productId": product_id}


@router.put("/products/{product_id}")
def update_product(
    product_id: str,
    body: Dict[str, Any] = Body(...),
    products: ProductService = Depends(get_product_service),
):
    result = products.update_product(product_id, body)
    return {"message": "Product updated successfully", "result": update_result(result)}


@router.delete("/products/{product_id}")
def delete_product(product_id: str, products: ProductService = Depends(get_product_service)):
    products.delete_product(product_id)
    return {"message": "Product deleted successfully"}


# Users
@router.get("/users")
def list_users(users: UserService = Depends(get_user_service)):
    return [serialize_doc(u) for u in users.list_users()]


@router.get("/users/{email}")
def get_user(email: str, users: UserService = Depends(get_user_service)):
    return serialize_doc(users.get_user(email))


@router.patch("/users/{email}")
def update_user(email: str, body: UserUpdate, users: UserService = Depends(get_user_service)):
    result = users.update_user(email, body)
    return {"message": "User updated successfully", "result": update_result(result)}


@router.put("/user")
def upsert_user(body: UserUpsert, users: UserService = Depends(get_user_service)):
    outcome = users.upsert_user(body)
    if "document" in outcome:
        return serialize_doc(outcome["document"])
    return update_result(outcome["result"])


# Banners
@router.get("/banners")
def list_banners(banners: BannerService = Depends(get_banner_service)):
    return [serialize_doc(b) for b in banners.list_banners()]


@router.post("/banners", status_code=201)
def create_banner(body: BannerCreate, banners: BannerService = Depends(get_banner_service)):
    result = banners.create_banner(body)
    return {"message": "Banner uploaded successfully", "result": insert_result(result)}


@router.patch("/banners/{banner_id}")
@router.put("/banners/{banner_id}")
def update_banner(banner_id: str, body: BannerUpdate, banners: BannerService = Depends(get_banner_service)):
    result = banners.update_banner(banner_id, body)
    return {"message": "Banner updated successfully", "result": update_result(result)}


# Session
@router.get("/logout")
def logout(request: Request, response: Response):
    settings: Settings = request.app.state.settings
    try:
        response.delete_cookie(
            "token",
            secure=settings.is_production,
            samesite="none" if settings.is_production else "strict",
        )
    except Exception as exc:
        logger.error("failed to clear session cookie", exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "Failed to log out"})
    return {"success": True}


# Health + test
@router.get("/")
def root():
    return {"message": "AllMart API running"}


@router.get("/test")
def test_database(db: Database = Depends(get_db)):
    response = {
        "backend": "✅ Running",
        "database_url": "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set",
        "database_name": "✅ Set" if os.getenv("DATABASE_NAME") else "❌ Not Set",
        "collections": [],
    }
    try:
        response["collections"] = db.list_collection_names()[:10]
        response["orders"] = store_for(db, ORDERS, "order").count()
    except (PyMongoError, StoreError) as e:
        response["error"] = str(e)[:120]
    return response


# Error handlers
async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    if isinstance(exc, StoreError):
        logger.error("request failed", path=request.url.path, error=exc.message, cause=repr(exc.__cause__))
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    detail = f"{field}: {first.get('msg', 'invalid value')}" if field else first.get("msg", "invalid value")
    return JSONResponse(status_code=400, content={"error": f"Invalid request ({detail})"})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled error", path=request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(db: Optional[Database] = None, settings: Optional[Settings] = None) -> FastAPI:
    """Build the API. A supplied ``db`` is used as-is and never closed by the app."""
    settings = settings or get_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = None
        if app.state.db is None:
            client = database.connect(settings)
            app.state.db = client[settings.database_name]
            logger.info("connected to document store", database=settings.database_name)
        try:
            yield
        finally:
            if client is not None:
                database.close(client)
                app.state.db = None

    app = FastAPI(title="AllMart Storefront API", version="1.0.0", lifespan=lifespan)
    app.state.db = db
    app.state.settings = settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
    app.include_router(router)
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port)
