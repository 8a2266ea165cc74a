import time
from typing import List

from database import MongoStore, parse_object_id
from errors import NotFoundError, ValidationError
from schemas import BannerCreate, BannerUpdate


class BannerService:
    def __init__(self, store: MongoStore):
        self.store = store

    def list_banners(self) -> List[dict]:
        return self.store.find()

    def create_banner(self, body: BannerCreate):
        return self.store.insert({
            "url": body.url,
            "heading": body.heading,
            "description": body.description,
            "timestamp": int(time.time() * 1000),
        })

    def update_banner(self, banner_id: str, body: BannerUpdate):
        oid = parse_object_id(banner_id, "banner")
        # empty strings count as not supplied
        update = {k: v for k, v in body.model_dump().items() if v}
        if not update:
            raise ValidationError("No fields provided for update")
        result = self.store.update_by_id(oid, update)
        if result.matched_count == 0:
            raise NotFoundError("Banner not found")
        return result
