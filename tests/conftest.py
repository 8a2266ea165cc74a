import mongomock
import pytest
from fastapi.testclient import TestClient

from config import Settings
from database import ORDERS, store_for
from main import create_app
from orders import OrderService
from tests.helpers import FakeClock


@pytest.fixture()
def settings():
    return Settings(environment="test")


@pytest.fixture()
def db():
    return mongomock.MongoClient()["allmart_test"]


@pytest.fixture()
def client(db, settings):
    return TestClient(create_app(db, settings))


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def order_service(db, clock):
    return OrderService(store_for(db, ORDERS, "order"), clock=clock)
