"""
User profiles keyed by e-mail.

PUT /user is an idempotent upsert keyed by (email, displayName): a stored
profile is returned untouched unless the request carries status "Requested",
in which case only the status is written.
"""
import time
from typing import Any, Dict, List

from database import MongoStore
from errors import NotFoundError, ValidationError
from schemas import UserUpdate, UserUpsert

REQUESTED = "Requested"


class UserService:
    def __init__(self, store: MongoStore):
        self.store = store

    def list_users(self) -> List[dict]:
        return self.store.find()

    def get_user(self, email: str) -> dict:
        user = self.store.find_one({"email": email})
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_user(self, email: str, body: UserUpdate):
        fields = body.model_dump(exclude_unset=True)
        if not fields:
            raise ValidationError("No changes made to the user")
        result = self.store.update_one({"email": email}, fields)
        if result.matched_count == 0:
            raise NotFoundError("User not found")
        if result.modified_count == 0:
            raise ValidationError("No changes made to the user")
        return result

    def upsert_user(self, body: UserUpsert) -> Dict[str, Any]:
        """Return {"document": doc} for an untouched profile, else {"result": UpdateResult}."""
        user = body.model_dump(exclude_unset=True)
        query = {"email": user["email"], "name": user.get("displayName")}
        existing = self.store.find_one(query)
        if existing:
            if user.get("status") == REQUESTED:
                return {"result": self.store.update_one(query, {"status": REQUESTED})}
            return {"document": existing}
        user["timestamp"] = int(time.time() * 1000)
        return {"result": self.store.update_one(query, user, upsert=True)}
