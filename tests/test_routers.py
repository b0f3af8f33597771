"""API tests through FastAPI's TestClient."""

import pytest

from kinship.core.connection_utils import SELF_RELATIONSHIP_ERROR


def payload(from_id, to_id, relationship_type, **fields):
    return {
        "from_person_id": from_id,
        "to_person_id": to_id,
        "relationship_type": relationship_type,
        **fields,
    }


@pytest.fixture
def people(seed_people):
    seed_people({"alice": "Alice Smith", "bob": "Bob Smith", "carol": "Carol Jones"})


@pytest.fixture
def tree(client, seed_people):
    """Tree t1: mom and dad are married with one kid."""
    seed_people({"mom": "Mary Baker", "dad": "Tom Baker", "kid": "Lily Baker"}, tree_id="t1")
    for body in (
        payload("mom", "kid", "parent", family_tree_id="t1"),
        payload("dad", "kid", "parent", family_tree_id="t1"),
        payload("mom", "dad", "spouse", family_tree_id="t1"),
    ):
        assert client.post("/connections", json=body).status_code == 201
    return "t1"


def test_root(client):
    res = client.get("/")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"


# ============================================================================
# /connections
# ============================================================================

class TestConnectionRoutes:
    def test_relationship_types(self, client):
        types = client.get("/connections/types").json()

        assert len(types) == 11
        assert types[0]["value"] == "parent"

    def test_create_with_reciprocal(self, client, people):
        res = client.post("/connections", json=payload("alice", "bob", "parent"))

        assert res.status_code == 201
        body = res.json()
        assert body["main"]["relationship_type"] == "parent"
        assert body["reciprocal"]["relationship_type"] == "child"
        assert body["reciprocal"]["from_person_id"] == "bob"
        assert body["reciprocal_error"] is None

    def test_create_canonicalises_bidirectional(self, client, people):
        body = client.post("/connections", json=payload("bob", "alice", "sibling")).json()

        assert body["main"]["from_person_id"] == "alice"
        assert body["reciprocal"] is None

    def test_self_relationship_is_422(self, client, people):
        res = client.post("/connections", json=payload("alice", "alice", "parent"))

        assert res.status_code == 422
        assert res.json()["detail"] == [SELF_RELATIONSHIP_ERROR]

    def test_missing_fields_is_422(self, client):
        res = client.post("/connections", json={})

        assert res.status_code == 422
        assert len(res.json()["detail"]) == 3

    def test_duplicate_is_409(self, client, people):
        client.post("/connections", json=payload("alice", "bob", "spouse"))
        res = client.post("/connections", json=payload("bob", "alice", "spouse"))

        assert res.status_code == 409
        assert res.json()["detail"] == "This connection already exists"

    def test_person_listing(self, client, people):
        client.post("/connections", json=payload("alice", "bob", "parent"))

        listing = client.get("/connections/person/bob").json()
        assert len(listing) == 1
        assert listing[0]["relationship_type"] == "child"
        assert listing[0]["direction"] == "outgoing"
        assert listing[0]["other_person_name"] == "Alice Smith"

    def test_all(self, client, people):
        client.post("/connections", json=payload("alice", "bob", "parent"))
        assert len(client.get("/connections/all").json()) == 2

    def test_exists(self, client, people):
        client.post("/connections", json=payload("alice", "carol", "sibling"))

        params = {"from_person_id": "carol", "to_person_id": "alice", "relationship_type": "sibling"}
        assert client.get("/connections/exists", params=params).json() == {"exists": True}

        params["relationship_type"] = "spouse"
        assert client.get("/connections/exists", params=params).json() == {"exists": False}

    def test_update(self, client, people):
        created = client.post("/connections", json=payload("alice", "bob", "parent")).json()

        res = client.patch(f"/connections/{created['main']['id']}", json={"notes": "adopted"})

        assert res.status_code == 200
        body = res.json()
        assert body["main"]["notes"] == "adopted"
        assert body["reciprocal"]["notes"] == "adopted"

    def test_update_empty_body_is_400(self, client, people):
        created = client.post("/connections", json=payload("alice", "bob", "parent")).json()
        res = client.patch(f"/connections/{created['main']['id']}", json={})
        assert res.status_code == 400

    def test_update_invalid_type_is_422(self, client, people):
        created = client.post("/connections", json=payload("alice", "bob", "parent")).json()
        res = client.patch(
            f"/connections/{created['main']['id']}", json={"relationship_type": "cousin"}
        )
        assert res.status_code == 422

    def test_update_onto_existing_edge_is_409(self, client, people):
        client.post("/connections", json=payload("alice", "bob", "sibling"))
        created = client.post("/connections", json=payload("bob", "alice", "parent")).json()

        res = client.patch(
            f"/connections/{created['main']['id']}", json={"relationship_type": "sibling"}
        )
        assert res.status_code == 409

    def test_update_missing_is_404(self, client):
        assert client.patch("/connections/nope", json={"notes": "x"}).status_code == 404

    def test_delete(self, client, people):
        created = client.post("/connections", json=payload("alice", "bob", "parent")).json()

        res = client.delete(f"/connections/{created['main']['id']}")

        assert res.status_code == 200
        assert res.json() == {"message": "Connection deleted", "reciprocal_error": None}
        assert client.get("/connections/all").json() == []

    def test_delete_missing_is_404(self, client):
        assert client.delete("/connections/nope").status_code == 404

    def test_audit_and_cleanup(self, client, people):
        client.post("/connections", json=payload("alice", "bob", "parent"))

        audit = client.get("/connections/audit").json()
        assert audit["total"] == 2
        assert audit["duplicates"] == []

        cleanup = client.post("/connections/cleanup").json()
        assert cleanup == {"removed": 0, "errors": []}


# ============================================================================
# /family-trees
# ============================================================================

class TestFamilyTreeRoutes:
    def test_connections(self, client, tree):
        connections = client.get(f"/family-trees/{tree}/connections").json()
        assert sorted(c["relationship_type"] for c in connections) == [
            "child", "child", "parent", "parent", "spouse",
        ]

    def test_generations(self, client, tree):
        body = client.get(f"/family-trees/{tree}/generations").json()

        assert set(body) == {"generations", "stats"}
        assert body["generations"]["kid"]["is_donor"] is False
        assert body["stats"]["generation_counts"] == {"0": 2, "1": 1}
        generations = body["generations"]
        assert generations["mom"]["generation"] == 0
        assert generations["dad"]["generation"] == 0
        assert generations["kid"]["generation"] == 1
        assert body["stats"]["total_generations"] == 2

    def test_unions(self, client, tree):
        body = client.get(f"/family-trees/{tree}/unions").json()

        assert len(body["unions"]) == 1
        union = body["unions"][0]
        assert union["id"] == "union_0_dad_mom"
        assert union["union_type"] == "marriage"
        assert [c["id"] for c in body["family_units"][0]["children"]] == ["kid"]
        assert body["family_units"][0]["family_name"] == "Baker"

    def test_unions_query_override(self, client, tree):
        body = client.get(f"/family-trees/{tree}/unions", params={"min_shared_children": 2}).json()
        assert body["unions"] == []

    def test_consistency(self, client, tree):
        report = client.get(f"/family-trees/{tree}/consistency").json()
        assert report["is_valid"] is True

    def test_stats(self, client, tree):
        stats = client.get(f"/family-trees/{tree}/stats").json()

        assert stats["total_persons"] == 3
        assert stats["total_connections"] == 5
        assert stats["generation_count"] == 2

    def test_ancestors_and_descendants(self, client, tree):
        ancestors = client.get(f"/family-trees/{tree}/persons/kid/ancestors").json()
        assert sorted(p["id"] for p in ancestors) == ["dad", "mom"]

        descendants = client.get(
            f"/family-trees/{tree}/persons/mom/descendants", params={"max_depth": 1}
        ).json()
        assert [p["id"] for p in descendants] == ["kid"]

    def test_person_outside_tree_is_404(self, client, tree):
        assert client.get(f"/family-trees/{tree}/persons/nobody/ancestors").status_code == 404

    def test_unknown_tree_is_404(self, client):
        assert client.get("/family-trees/missing/stats").status_code == 404


# ============================================================================
# /graph
# ============================================================================

class TestGraphRoutes:
    def test_analyze(self, client):
        body = {
            "persons": [
                {"id": "p1", "name": "Pat Smith"},
                {"id": "p2", "name": "Sam Smith"},
                {"id": "c1", "name": "Ada Smith", "date_of_birth": "2001"},
                {"id": "d", "name": "Donor"},
            ],
            "connections": [
                {"id": "1", "from_person_id": "p1", "to_person_id": "c1", "relationship_type": "parent"},
                {"id": "2", "from_person_id": "p2", "to_person_id": "c1", "relationship_type": "parent"},
                {"id": "3", "from_person_id": "p1", "to_person_id": "p2", "relationship_type": "partner"},
                {"id": "4", "from_person_id": "d", "to_person_id": "c1", "relationship_type": "donor"},
                {"id": "5", "from_person_id": "p1", "to_person_id": "ghost", "relationship_type": "parent"},
            ],
        }

        res = client.post("/graph/analyze", json=body)

        assert res.status_code == 200
        analysis = res.json()
        assert analysis["generations"]["c1"]["generation"] == 1
        assert analysis["generations"]["d"]["is_donor"] is True
        assert analysis["generations"]["d"]["generation"] == 0
        assert analysis["generation_stats"]["donor_count"] == 1
        assert analysis["unions"]["unions"][0]["union_type"] == "partnership"
        assert analysis["consistency"]["is_valid"] is True
        assert analysis["stats"]["total_connections"] == 4

    def test_analyze_rejects_bad_dates(self, client):
        body = {"persons": [{"id": "p1", "date_of_birth": "01/02/1990"}], "connections": []}
        assert client.post("/graph/analyze", json=body).status_code == 422

    def test_palette(self, client):
        palette = client.get("/graph/palette").json()
        assert len(palette) == 11
        assert palette[-1]["label"] == "Donor"
