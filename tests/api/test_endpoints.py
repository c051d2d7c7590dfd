"""HTTP tests for the tree endpoints."""

from unittest.mock import AsyncMock, patch

import aiosqlite

from tests.fixtures import STANDARD_LAYOUT, build_tree


class TestHealth:
    async def test_health(self, client):
        resp = await client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"


class TestReadEndpoints:
    async def test_empty_tree_gets_root(self, client):
        resp = await client.get("/api/tree")
        assert resp.status_code == 200
        data = resp.json()
        assert len(data) == 1
        assert data[0]["name"] == "root"
        assert (data[0]["left"], data[0]["right"]) == (1, 2)
        assert data[0]["descendant_count"] == 0

    async def test_full_tree_in_preorder(self, client, tree):
        await build_tree(tree, STANDARD_LAYOUT)
        resp = await client.get("/api/tree")
        assert [n["name"] for n in resp.json()] == ["root", "A", "A1", "A2", "B", "B1", "C"]

    async def test_get_node(self, client, tree):
        nodes = await build_tree(tree, STANDARD_LAYOUT)
        resp = await client.get(f"/api/nodes/{nodes['B'].id}")
        assert resp.status_code == 200
        data = resp.json()
        assert data["name"] == "B"
        assert (data["left"], data["right"]) == (8, 11)
        assert data["descendant_count"] == 1

    async def test_get_missing_node(self, client):
        resp = await client.get("/api/nodes/999")
        assert resp.status_code == 404

    async def test_subtree(self, client, tree):
        nodes = await build_tree(tree, STANDARD_LAYOUT)
        resp = await client.get(f"/api/nodes/{nodes['A'].id}/subtree")
        assert [n["name"] for n in resp.json()] == ["A", "A1", "A2"]

    async def test_children_with_depth(self, client, tree):
        nodes = await build_tree(tree, STANDARD_LAYOUT)
        resp = await client.get(f"/api/nodes/{nodes['root'].id}/children")
        assert resp.status_code == 200
        entries = resp.json()
        assert [e["node"]["name"] for e in entries] == ["root", "A", "B", "C"]
        assert [e["depth"] for e in entries] == [0, 1, 1, 1]

    async def test_path(self, client, tree):
        nodes = await build_tree(tree, STANDARD_LAYOUT)
        resp = await client.get(f"/api/nodes/{nodes['A1'].id}/path")
        assert [n["name"] for n in resp.json()] == ["root", "A", "A1"]

    async def test_subtree_of_missing_node(self, client):
        resp = await client.get("/api/nodes/999/subtree")
        assert resp.status_code == 404


class TestInsertEndpoint:
    async def test_insert_under_root_by_default(self, client):
        resp = await client.post("/api/nodes", json={"name": "A"})
        assert resp.status_code == 201
        data = resp.json()
        assert data["changed"] is True
        assert data["node"]["name"] == "A"
        assert (data["node"]["left"], data["node"]["right"]) == (2, 3)

    async def test_insert_at_position(self, client, tree):
        nodes = await build_tree(tree, STANDARD_LAYOUT)
        resp = await client.post(
            "/api/nodes",
            json={"name": "first", "parent_id": nodes["root"].id, "position": 0},
        )
        assert resp.status_code == 201
        assert (resp.json()["node"]["left"], resp.json()["node"]["right"]) == (2, 3)

        children = await tree.children("root")
        assert [n.name for n in children] == ["first", "A", "B", "C"]

    async def test_insert_missing_parent(self, client):
        resp = await client.post("/api/nodes", json={"name": "x", "parent_id": 999})
        assert resp.status_code == 404

    async def test_insert_negative_position(self, client):
        resp = await client.post("/api/nodes", json={"name": "x", "position": -1})
        assert resp.status_code == 422

    async def test_insert_empty_name(self, client):
        resp = await client.post("/api/nodes", json={"name": ""})
        assert resp.status_code == 422


class TestMoveEndpoints:
    async def test_move_under_new_parent(self, client, tree):
        nodes = await build_tree(tree, STANDARD_LAYOUT)
        resp = await client.post(
            f"/api/nodes/{nodes['A'].id}/move", json={"parent_id": nodes["C"].id}
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["changed"] is True
        assert (data["node"]["left"], data["node"]["right"]) == (7, 12)

    async def test_move_into_descendant_conflicts(self, client, tree):
        nodes = await build_tree(tree, STANDARD_LAYOUT)
        resp = await client.post(
            f"/api/nodes/{nodes['A'].id}/move", json={"parent_id": nodes["A1"].id}
        )
        assert resp.status_code == 409

    async def test_move_to_current_parent_is_noop(self, client, tree):
        nodes = await build_tree(tree, STANDARD_LAYOUT)
        resp = await client.post(
            f"/api/nodes/{nodes['A1'].id}/move", json={"parent_id": nodes["A"].id}
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["changed"] is False
        assert [n["code"] for n in data["notices"]] == ["same_parent"]

    async def test_move_missing_target(self, client, tree):
        nodes = await build_tree(tree, STANDARD_LAYOUT)
        resp = await client.post(f"/api/nodes/{nodes['A'].id}/move", json={"parent_id": 999})
        assert resp.status_code == 404

    async def test_storage_failure_is_reported(self, client, tree):
        nodes = await build_tree(tree, STANDARD_LAYOUT)
        failing = AsyncMock(side_effect=aiosqlite.OperationalError("disk I/O error"))
        with patch.object(tree.shifter, "shift_range", failing):
            resp = await client.post(
                f"/api/nodes/{nodes['B1'].id}/move", json={"parent_id": nodes["A"].id}
            )

        assert resp.status_code == 500
        assert "disk I/O error" in resp.json()["detail"]
        parent = (await client.get(f"/api/nodes/{nodes['B1'].id}/path")).json()[-2]
        assert parent["name"] == "B"

    async def test_move_up(self, client, tree):
        nodes = await build_tree(tree, STANDARD_LAYOUT)
        resp = await client.post(f"/api/nodes/{nodes['B'].id}/move-up")
        assert resp.status_code == 200
        assert (resp.json()["node"]["left"], resp.json()["node"]["right"]) == (2, 5)

    async def test_move_up_first_sibling_reports_notice(self, client, tree):
        nodes = await build_tree(tree, STANDARD_LAYOUT)
        resp = await client.post(f"/api/nodes/{nodes['A'].id}/move-up")
        assert resp.status_code == 200
        data = resp.json()
        assert data["changed"] is False
        assert [n["code"] for n in data["notices"]] == ["already_first"]

    async def test_move_down_last_sibling_reports_notice(self, client, tree):
        nodes = await build_tree(tree, STANDARD_LAYOUT)
        resp = await client.post(f"/api/nodes/{nodes['C'].id}/move-down")
        assert resp.status_code == 200
        assert [n["code"] for n in resp.json()["notices"]] == ["already_last"]

    async def test_move_down_missing_node(self, client):
        resp = await client.post("/api/nodes/999/move-down")
        assert resp.status_code == 404


class TestDeleteEndpoint:
    async def test_delete_promotes_children(self, client, tree):
        nodes = await build_tree(tree, STANDARD_LAYOUT)
        resp = await client.delete(f"/api/nodes/{nodes['B'].id}")
        assert resp.status_code == 200
        assert resp.json()["node"] is None

        names = [n["name"] for n in (await client.get("/api/tree")).json()]
        assert names == ["root", "A", "A1", "A2", "B1", "C"]

    async def test_delete_subtree(self, client, tree):
        nodes = await build_tree(tree, STANDARD_LAYOUT)
        resp = await client.delete(
            f"/api/nodes/{nodes['A'].id}", params={"keep_children": "false"}
        )
        assert resp.status_code == 200

        data = (await client.get("/api/tree")).json()
        assert [n["name"] for n in data] == ["root", "B", "B1", "C"]
        assert (data[0]["left"], data[0]["right"]) == (1, 8)

    async def test_delete_root_with_children_conflicts(self, client, tree):
        nodes = await build_tree(tree, STANDARD_LAYOUT)
        resp = await client.delete(f"/api/nodes/{nodes['root'].id}")
        assert resp.status_code == 409

    async def test_delete_missing_node(self, client):
        resp = await client.delete("/api/nodes/999")
        assert resp.status_code == 404
