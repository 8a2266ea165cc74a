import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from database import MongoStore, parse_object_id
from errors import NotFoundError, ValidationError
from schemas import ProductCreate

SEARCH_FIELDS = ["name", "description", "details", "category", "productTag", "colors.name", "features"]


def build_search_query(q: Optional[str]) -> Dict[str, Any]:
    """Case-insensitive substring match over the searchable product fields."""
    if not q:
        raise ValidationError("Search query is required")
    pattern = re.escape(q)
    return {"$or": [{field: {"$regex": pattern, "$options": "i"}} for field in SEARCH_FIELDS]}


class ProductService:
    def __init__(self, store: MongoStore):
        self.store = store

    def list_products(self) -> List[dict]:
        return self.store.find()

    def search_products(self, q: Optional[str]) -> List[dict]:
        return self.store.find(build_search_query(q))

    def get_product(self, product_id: str) -> dict:
        product = self.store.find_by_id(parse_object_id(product_id, "product"))
        if not product:
            raise NotFoundError("Product not found")
        return product

    def create_product(self, body: ProductCreate) -> str:
        now = datetime.now(timezone.utc)
        doc = body.model_dump()
        doc.pop("_id", None)
        doc.update({"createdAt": now, "updatedAt": now})
        result = self.store.insert(doc)
        return str(result.inserted_id)

    def update_product(self, product_id: str, fields: Dict[str, Any]):
        oid = parse_object_id(product_id, "product")
        update = {k: v for k, v in fields.items() if k not in ("_id", "createdAt")}
        update["updatedAt"] = datetime.now(timezone.utc)
        result = self.store.update_by_id(oid, update)
        if result.matched_count == 0:
            raise NotFoundError("Product not found")
        return result

    def delete_product(self, product_id: str) -> None:
        result = self.store.delete_by_id(parse_object_id(product_id, "product"))
        if result.deleted_count == 0:
            raise NotFoundError("Product not found")
