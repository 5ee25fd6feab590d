"""
REST adapter end to end through FastAPI's TestClient.
"""
import pytest
from fastapi.testclient import TestClient

from application.services.authentication import AuthenticationService

JWT_SECRET = "rest-test-secret"


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("DB_PATH", str(tmp_path / "api.db"))
    monkeypatch.setenv("JWT_SECRET", JWT_SECRET)
    monkeypatch.setenv("AGRI_MARKET_HOME", str(tmp_path / "client"))
    from adapters.rest.app import app

    with TestClient(app) as test_client:
        yield test_client


def _auth(user_id: str) -> dict:
    token = AuthenticationService(JWT_SECRET).issue_token(user_id)
    return {"Authorization": f"Bearer {token}"}


def _farm_body(**overrides) -> dict:
    body = {
        "farmName": "Green Acres",
        "farmLocation": {"region": "Ashanti Region", "district": "Kumasi Metro"},
        "farmSize": 12.5,
        "productionScale": "Small",
        "ownershipStatus": "Owned",
        "fullName": "Ama Mensah",
        "contactPhone": "+233 0241234567",
        "contactEmail": "ama@example.com",
        "farmType": "Crop Farming",
        "cropsGrown": ["maize"],
    }
    body.update(overrides)
    return body


def _store_body() -> dict:
    return {
        "storeName": "Agro Mart",
        "productionScale": "Medium",
        "branches": [{
            "branchName": "Main",
            "branchLocation": "Accra Central",
            "branchPhone": "0241234567",
        }],
        "storeImages": [{"url": "http://img/1", "itemName": "Hoe", "itemPrice": 20}],
    }


# ---------------------------------------------------------------------------
# Health & auth
# ---------------------------------------------------------------------------

def test_health(client):
    assert client.get("/health").json()["status"] == "ok"


def test_missing_or_bad_token_is_401(client):
    assert client.get("/farms/me").status_code == 401
    bad = {"Authorization": "Bearer not-a-jwt"}
    assert client.get("/wishlist", headers=bad).status_code == 401
    forged = AuthenticationService("other-secret").issue_token("alice")
    resp = client.get("/wishlist", headers={"Authorization": f"Bearer {forged}"})
    assert resp.status_code == 401


# ---------------------------------------------------------------------------
# Farms
# ---------------------------------------------------------------------------

def test_farm_lifecycle(client):
    created = client.post("/farms", json=_farm_body(), headers=_auth("alice"))
    assert created.status_code == 201
    body = created.json()
    assert body["success"] is True
    farm = body["data"]
    assert farm["userId"] == "alice"
    assert farm["cropsGrown"] == ["maize"]
    assert farm["poultryType"] == []

    resp = client.put(f"/farms/{farm['id']}", json={
        "basicInfo": {"farmType": "Poultry"},
        "arrayUpdates": [{"field": "poultryType", "operation": "add", "value": "broiler"}],
    }, headers=_auth("alice"))
    assert resp.status_code == 200
    updated = resp.json()["data"]
    assert updated["farmType"] == "Poultry"
    assert updated["cropsGrown"] == []
    assert updated["poultryType"] == ["broiler"]
    assert updated["version"] == 2

    mine = client.get("/farms/me", headers=_auth("alice")).json()
    assert mine["count"] == 1

    deleted = client.delete(f"/farms/{farm['id']}", headers=_auth("alice"))
    assert deleted.json()["message"] == "Farm profile deleted"
    assert client.get(f"/farms/{farm['id']}", headers=_auth("alice")).status_code == 404


def test_wrong_production_field_is_400_and_nothing_changes(client):
    farm = client.post("/farms", json=_farm_body(), headers=_auth("alice")).json()["data"]

    resp = client.put(f"/farms/{farm['id']}", json={
        "basicInfo": {"farmName": "Renamed"},
        "arrayUpdates": [{"field": "livestockProduced", "operation": "add", "value": "goat"}],
    }, headers=_auth("alice"))

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Can only update cropsGrown for farm type Crop Farming"
    stored = client.get(f"/farms/{farm['id']}", headers=_auth("alice")).json()["data"]
    assert stored["farmName"] == "Green Acres"
    assert stored["version"] == 1


def test_farm_owned_by_someone_else_is_404(client):
    farm = client.post("/farms", json=_farm_body(), headers=_auth("alice")).json()["data"]

    resp = client.put(
        f"/farms/{farm['id']}", json={"basicInfo": {"farmSize": 1}}, headers=_auth("bob"),
    )

    assert resp.status_code == 404
    assert resp.json()["detail"] == "Farm profile not found or unauthorized"


def test_farm_create_validation(client):
    stray = _farm_body(poultryType=["layers"])
    assert client.post("/farms", json=stray, headers=_auth("alice")).status_code == 400

    bad_phone = _farm_body(contactPhone="12345")
    assert client.post("/farms", json=bad_phone, headers=_auth("alice")).status_code == 422

    bad_type = _farm_body(farmType="Fishing")
    assert client.post("/farms", json=bad_type, headers=_auth("alice")).status_code == 422


def test_public_farm_listing_filters(client):
    client.post("/farms", json=_farm_body(), headers=_auth("alice"))
    client.post(
        "/farms",
        json=_farm_body(farmType="Poultry", cropsGrown=[], poultryType=["layers"]),
        headers=_auth("bob"),
    )

    everything = client.get("/farms").json()
    assert everything["count"] == 2
    poultry = client.get("/farms", params={"farmType": "Poultry"}).json()["data"]
    assert [f["userId"] for f in poultry] == ["bob"]
    by_user = client.get("/farms", params={"userId": "alice"}).json()["data"]
    assert [f["farmType"] for f in by_user] == ["Crop Farming"]


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------

def test_store_lifecycle(client):
    created = client.post("/stores/me", json=_store_body(), headers=_auth("alice"))
    assert created.status_code == 201
    store = created.json()["data"]
    assert store["branches"][0]["id"]
    assert store["storeImages"][0]["itemPrice"] == "20"

    again = client.post("/stores/me", json=_store_body(), headers=_auth("alice"))
    assert again.status_code == 409

    resp = client.put("/stores/me", json={
        "operation": "addBranch",
        "branches": {"branchName": "North", "branchLocation": "Tamale", "branchPhone": "0241234568"},
    }, headers=_auth("alice"))
    assert resp.status_code == 200
    assert [b["branchName"] for b in resp.json()["data"]["branches"]] == ["Main", "North"]

    image_id = store["storeImages"][0]["id"]
    resp = client.put("/stores/me", json={
        "operation": "updateImageAvailability", "imageId": image_id, "available": False,
    }, headers=_auth("alice"))
    assert resp.json()["data"]["storeImages"][0]["available"] is False

    public = client.get("/stores/user/alice").json()["data"]
    assert public["storeName"] == "Agro Mart"
    assert client.get("/stores/user/bob").status_code == 404

    assert client.delete("/stores/me", headers=_auth("alice")).status_code == 200
    assert client.get("/stores/me", headers=_auth("alice")).status_code == 404


def test_store_operation_envelope_validation(client):
    client.post("/stores/me", json=_store_body(), headers=_auth("alice"))

    unknown = client.put("/stores/me", json={"operation": "renameStore"}, headers=_auth("alice"))
    assert unknown.status_code == 422

    missing = client.put("/stores/me", json={"operation": "deleteBranch"}, headers=_auth("alice"))
    assert missing.status_code == 422

    bad_info = client.put("/stores/me", json={
        "operation": "updateStoreInfo", "storeInfo": {"branches": []},
    }, headers=_auth("alice"))
    assert bad_info.status_code == 422

    noop = client.put("/stores/me", json={
        "operation": "updateBranch",
        "branchId": "missing",
        "branches": {"branchName": "Ghost", "branchLocation": "Nowhere", "branchPhone": "0241234567"},
    }, headers=_auth("alice"))
    assert noop.status_code == 200
    assert [b["branchName"] for b in noop.json()["data"]["branches"]] == ["Main"]
    assert noop.json()["data"]["version"] == 1


# ---------------------------------------------------------------------------
# Wishlist
# ---------------------------------------------------------------------------

def _wish(item_id="p1", item_type="FarmProduct", name="Maize") -> dict:
    return {"itemId": item_id, "itemType": item_type, "productName": name, "price": 10}


def test_wishlist_add_duplicate_and_summary(client):
    first = client.post("/wishlist", json=_wish(), headers=_auth("alice"))
    assert first.status_code == 201
    assert first.json()["summary"] == {"totalItems": 1, "farmProducts": 1, "storeProducts": 0}

    dup = client.post("/wishlist", json=_wish(), headers=_auth("alice"))
    assert dup.status_code == 409

    client.post("/wishlist", json=_wish("s1", "StoreProduct", "Hoe"), headers=_auth("alice"))
    body = client.get("/wishlist", headers=_auth("alice")).json()
    assert [i["itemId"] for i in body["data"]["items"]] == ["p1", "s1"]
    assert body["summary"] == {"totalItems": 2, "farmProducts": 1, "storeProducts": 1}


def test_wishlist_item_update_and_removal(client):
    added = client.post("/wishlist", json=_wish(), headers=_auth("alice")).json()
    item_id = added["data"]["items"][0]["id"]

    resp = client.put(f"/wishlist/items/{item_id}", json={
        "notes": "two bags", "availability": {"availableQuantity": 5, "unit": "bags"},
    }, headers=_auth("alice"))
    assert resp.status_code == 200
    item = resp.json()["data"]
    assert item["notes"] == "two bags"
    assert item["availability"]["availableQuantity"] == "5"

    assert client.get(f"/wishlist/items/{item_id}", headers=_auth("bob")).status_code == 404

    removed = client.delete("/wishlist/items/FarmProduct/p1", headers=_auth("alice"))
    assert removed.json()["summary"]["totalItems"] == 0
    again = client.delete("/wishlist/items/FarmProduct/p1", headers=_auth("alice"))
    assert again.status_code == 200


def test_wishlist_clear(client):
    client.post("/wishlist", json=_wish("a"), headers=_auth("alice"))
    client.post("/wishlist", json=_wish("b", "StoreProduct"), headers=_auth("alice"))

    cleared = client.delete("/wishlist", headers=_auth("alice")).json()

    assert cleared["data"]["items"] == []
    assert cleared["summary"] == {"totalItems": 0, "farmProducts": 0, "storeProducts": 0}
    summary = client.get("/wishlist/summary", headers=_auth("alice")).json()["data"]
    assert summary == {"totalItems": 0, "farmProducts": 0, "storeProducts": 0}


def test_wishlist_merge(client):
    client.post("/wishlist", json=_wish("a"), headers=_auth("alice"))
    guest_items = [
        {"id": "guest_1700000000000_abc123xyz", **_wish("a")},
        {"id": "guest_1700000000001_abc123xyz", **_wish("b", "StoreProduct", "Hoe"),
         "availability": {"availableQuantity": "3"}},
        {"itemId": "c", "itemType": "Vegetable", "productName": "Kale"},
    ]

    resp = client.post("/wishlist/merge", json={"items": guest_items}, headers=_auth("alice"))

    assert resp.status_code == 200
    body = resp.json()
    assert [i["itemId"] for i in body["data"]["added"]] == ["b"]
    assert body["data"]["alreadyPresent"] == [{"itemId": "a", "itemType": "FarmProduct"}]
    assert [f["itemId"] for f in body["data"]["failed"]] == ["c"]
    assert body["summary"] == {"totalItems": 2, "farmProducts": 1, "storeProducts": 1}

    retry = client.post("/wishlist/merge", json={"items": guest_items}, headers=_auth("alice"))
    assert retry.json()["data"]["added"] == []
    assert retry.json()["summary"]["totalItems"] == 2


@pytest.mark.parametrize("bad_fields", [
    {"inStock": "sometimes"},
    {"availability": "soon"},
    {"productImage": {"url": "http://img/x"}},
])
def test_malformed_guest_item_does_not_block_the_merge(client, bad_fields):
    guest_items = [_wish("g1"), {**_wish("b1", "StoreProduct"), **bad_fields}]

    resp = client.post("/wishlist/merge", json={"items": guest_items}, headers=_auth("alice"))

    assert resp.status_code == 200
    body = resp.json()
    assert [i["itemId"] for i in body["data"]["added"]] == ["g1"]
    assert [f["itemId"] for f in body["data"]["failed"]] == ["b1"]
    summary = client.get("/wishlist/summary", headers=_auth("alice")).json()["data"]
    assert summary["totalItems"] == 1


def test_merge_applies_the_same_rules_as_add(client):
    negative = {**_wish("neg"), "price": -5}
    long_name = _wish("long", name="x" * 201)
    long_notes = {**_wish("notes"), "notes": "n" * 501}
    assert client.post("/wishlist", json=negative, headers=_auth("alice")).status_code == 422

    resp = client.post(
        "/wishlist/merge",
        json={"items": [negative, long_name, long_notes, "not-an-item", _wish("ok")]},
        headers=_auth("alice"),
    )

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert [i["itemId"] for i in data["added"]] == ["ok"]
    assert [f["itemId"] for f in data["failed"]] == ["neg", "long", "notes", ""]
    assert "price" in data["failed"][0]["reason"]
    assert resp.json()["summary"]["totalItems"] == 1
