from bson import ObjectId


def _seed_user(db, **fields):
    user = {"email": "ada@gmail.com", "name": "Ada", "role": "user"}
    user.update(fields)
    db["users"].insert_one(user)


class TestUserEndpoints:
    def test_list_and_get(self, client, db):
        _seed_user(db)

        assert [u["email"] for u in client.get("/users").json()] == ["ada@gmail.com"]
        assert client.get("/users/ada@gmail.com").json()["name"] == "Ada"

    def test_get_unknown(self, client):
        assert client.get("/users/nobody@gmail.com").status_code == 404

    def test_patch_sets_supplied_fields(self, client, db):
        _seed_user(db)

        response = client.patch("/users/ada@gmail.com", json={"role": "admin", "userName": "Ada L."})

        assert response.status_code == 200
        stored = db["users"].find_one({"email": "ada@gmail.com"})
        assert stored["role"] == "admin"
        assert stored["userName"] == "Ada L."

    def test_patch_without_change(self, client, db):
        _seed_user(db)

        response = client.patch("/users/ada@gmail.com", json={"role": "user"})

        assert response.status_code == 400
        assert response.json() == {"error": "No changes made to the user"}

    def test_patch_unknown(self, client):
        response = client.patch("/users/nobody@gmail.com", json={"role": "admin"})

        assert response.status_code == 404

    def test_upsert_inserts_then_returns_existing(self, client, db):
        body = {"email": "grace@gmail.com", "displayName": "Grace", "photo": "g.png"}

        created = client.put("/user", json=body)
        again = client.put("/user", json=body)

        assert created.status_code == 200
        assert created.json()["upsertedId"] is not None
        assert again.json()["email"] == "grace@gmail.com"
        assert db["users"].count_documents({"email": "grace@gmail.com"}) == 1
        assert "timestamp" in db["users"].find_one({"email": "grace@gmail.com"})

    def test_upsert_requested_status_updates_only_status(self, client, db):
        _seed_user(db, status="Active")

        response = client.put(
            "/user",
            json={"email": "ada@gmail.com", "displayName": "Ada", "status": "Requested", "role": "admin"},
        )

        assert response.json()["matchedCount"] == 1
        stored = db["users"].find_one({"email": "ada@gmail.com"})
        assert stored["status"] == "Requested"
        assert stored["role"] == "user"

    def test_upsert_matches_email_exactly_as_stored(self, client, db):
        _seed_user(db, email="Ada@Gmail.com")

        response = client.put("/user", json={"email": "Ada@Gmail.com", "displayName": "Ada"})

        assert response.status_code == 200
        assert response.json()["email"] == "Ada@Gmail.com"
        assert db["users"].count_documents({}) == 1

    def test_upsert_accepts_any_domain(self, client, db):
        response = client.put("/user", json={"email": "shop@store.test", "displayName": "Shop"})

        assert response.status_code == 200
        assert db["users"].count_documents({"email": "shop@store.test"}) == 1

    def test_upsert_requires_email(self, client):
        response = client.put("/user", json={"email": "", "displayName": "X"})

        assert response.status_code == 400


class TestBannerEndpoints:
    def _create(self, client):
        response = client.post(
            "/banners",
            json={"url": "https://cdn.example/eid.jpg", "heading": "Eid Sale", "description": "Up to 40% off"},
        )
        assert response.status_code == 201
        return response.json()["result"]["insertedId"]

    def test_create_and_list(self, client):
        self._create(client)

        banners = client.get("/banners").json()

        assert [b["heading"] for b in banners] == ["Eid Sale"]
        assert isinstance(banners[0]["timestamp"], int)

    def test_create_requires_all_fields(self, client):
        response = client.post("/banners", json={"url": "https://cdn.example/x.jpg"})

        assert response.status_code == 400

    def test_partial_update_via_patch_and_put(self, client, db):
        banner_id = self._create(client)

        assert client.patch(f"/banners/{banner_id}", json={"heading": "Puja Sale"}).status_code == 200
        assert client.put(f"/banners/{banner_id}", json={"description": "Flat 20%"}).status_code == 200

        stored = db["BannerCollection"].find_one({"_id": ObjectId(banner_id)})
        assert stored["heading"] == "Puja Sale"
        assert stored["description"] == "Flat 20%"
        assert stored["url"] == "https://cdn.example/eid.jpg"

    def test_update_without_fields(self, client):
        banner_id = self._create(client)

        response = client.patch(f"/banners/{banner_id}", json={})

        assert response.status_code == 400
        assert response.json() == {"error": "No fields provided for update"}

    def test_update_unknown_and_malformed(self, client):
        assert client.patch(f"/banners/{ObjectId()}", json={"heading": "x"}).status_code == 404
        assert client.patch("/banners/not-an-id", json={"heading": "x"}).status_code == 400
