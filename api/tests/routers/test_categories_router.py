"""
HTTP tests for the category endpoints, run against SQLite.

Covers the two-level tree rules and PATCH handling of explicit nulls.
"""
from finboard.models.category import Category


# ── GET /categories/ ─────────────────────────────────────────────────────────

class TestListCategories:
    def test_tree_with_system_defaults(self, db_client, ledger):
        resp = db_client().get("/api/v1/categories/")
        assert resp.status_code == 200
        roots = {c["name"]: c for c in resp.json()}
        assert set(roots) == {"Groceries", "Transport", "Salary"}
        assert [s["name"] for s in roots["Groceries"]["subcategories"]] == ["Produce", "Snacks"]


# ── depth ≤ 2 ────────────────────────────────────────────────────────────────

class TestTreeDepth:
    def test_child_under_top_level(self, db_client, ledger):
        resp = db_client().post("/api/v1/categories/", json={"name": "Bakery", "parent_id": 1})
        assert resp.status_code == 201
        assert resp.json()["parent_id"] == 1

    def test_child_under_system_category(self, db_client, ledger):
        resp = db_client().post("/api/v1/categories/", json={"name": "Tolls", "parent_id": 4})
        assert resp.status_code == 201

    def test_unknown_parent(self, db_client, ledger):
        resp = db_client().post("/api/v1/categories/", json={"name": "Bakery", "parent_id": 999})
        assert resp.status_code == 404

    def test_other_users_parent_is_unknown(self, db_client, ledger):
        resp = db_client().post("/api/v1/categories/", json={"name": "Bakery", "parent_id": 6})
        assert resp.status_code == 404

    def test_grandchild_rejected(self, db_client, ledger):
        resp = db_client().post("/api/v1/categories/", json={"name": "Chips", "parent_id": 3})
        assert resp.status_code == 422

    def test_own_parent_rejected(self, db_client, ledger):
        resp = db_client().patch("/api/v1/categories/1", json={"parent_id": 1})
        assert resp.status_code == 422

    def test_parent_with_children_cannot_be_nested(self, db_client, ledger):
        resp = db_client().patch("/api/v1/categories/1", json={"parent_id": 4})
        assert resp.status_code == 422
        assert ledger.get(Category, 1).parent_id is None

    def test_move_child_to_top_level(self, db_client, ledger):
        resp = db_client().patch("/api/v1/categories/3", json={"parent_id": None})
        assert resp.status_code == 200
        assert resp.json()["parent_id"] is None


# ── PATCH /categories/{id} ───────────────────────────────────────────────────

class TestUpdateCategory:
    def test_null_name_leaves_name(self, db_client, ledger):
        resp = db_client().patch("/api/v1/categories/1", json={"name": None})
        assert resp.status_code == 200
        assert resp.json()["name"] == "Groceries"

    def test_null_sort_order_and_flag_ignored(self, db_client, ledger):
        resp = db_client().patch("/api/v1/categories/2", json={"sort_order": None, "is_active": None})
        assert resp.status_code == 200
        assert resp.json()["sort_order"] == 0
        assert resp.json()["is_active"] is True

    def test_rename(self, db_client, ledger):
        resp = db_client().patch("/api/v1/categories/2", json={"name": "Fruit & Veg", "sort_order": 3})
        assert resp.status_code == 200
        assert resp.json()["name"] == "Fruit & Veg"
        assert resp.json()["sort_order"] == 3

    def test_system_category_not_editable(self, db_client, ledger):
        resp = db_client().patch("/api/v1/categories/4", json={"name": "Travel"})
        assert resp.status_code == 404

    def test_other_users_category_not_editable(self, db_client, ledger):
        resp = db_client().patch("/api/v1/categories/6", json={"name": "Mine now"})
        assert resp.status_code == 404
