"""Family endpoints end to end."""

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from archivo.models.family_relation import FamilyRelation
from archivo.models.user import User


def relate(client, headers, to_user_id, relation_type, **extra):
    return client.post(
        "/api/family",
        json={"to_user_id": to_user_id, "relation_type": relation_type, **extra},
        headers=headers,
    )


def test_requires_authentication(client):
    response = client.get("/api/family")
    assert response.status_code == 401
    assert response.text == "Not authenticated"

    response = client.post("/api/family", json={"to_user_id": 1, "relation_type": "parent"})
    assert response.status_code == 401


def test_add_list_and_labels(client, signup):
    ana, ana_auth = signup("ana")
    ben, ben_auth = signup("ben")

    response = relate(client, ana_auth, ben["id"], "parent")
    assert response.status_code == 200, response.text
    created = response.json()
    assert created["from_user_id"] == ana["id"]
    assert created["to_user_id"] == ben["id"]
    assert created["relation_type"] == "parent"
    assert created["label"] == "parent"
    assert created["to_user"]["display_name"] == "Ben"
    assert created["derived"] == []

    mine = client.get("/api/family", headers=ana_auth).json()
    assert [r["id"] for r in mine] == [created["id"]]
    assert mine[0]["label"] == "parent"

    # Same edge, read from the other end
    theirs = client.get("/api/family", headers=ben_auth).json()
    assert [r["id"] for r in theirs] == [created["id"]]
    assert theirs[0]["label"] == "child"
    assert theirs[0]["relation_type"] == "parent"


def test_list_for_another_user(client, signup):
    ana, ana_auth = signup("ana")
    ben, _ = signup("ben")
    relate(client, ana_auth, ben["id"], "spouse")

    response = client.get("/api/family", params={"user_id": ben["id"]}, headers=ana_auth)
    assert response.status_code == 200
    assert response.json()[0]["label"] == "spouse"

    response = client.get("/api/family", params={"user_id": 999}, headers=ana_auth)
    assert response.status_code == 404


def test_invalid_relation_type(client, signup):
    _, ana_auth = signup("ana")
    ben, _ = signup("ben")

    response = relate(client, ana_auth, ben["id"], "best friend")
    assert response.status_code == 400
    assert "Invalid relation type" in response.text
    assert client.get("/api/family", headers=ana_auth).json() == []


def test_missing_relation_type(client, signup):
    _, ana_auth = signup("ana")
    ben, _ = signup("ben")

    response = client.post("/api/family", json={"to_user_id": ben["id"]}, headers=ana_auth)
    assert response.status_code == 400
    assert response.text.startswith("Invalid request")


def test_duplicate_and_self_rejected(client, signup):
    ana, ana_auth = signup("ana")
    ben, ben_auth = signup("ben")

    assert relate(client, ana_auth, ben["id"], "sibling").status_code == 200
    assert relate(client, ana_auth, ben["id"], "sibling").status_code == 400
    assert relate(client, ben_auth, ana["id"], "cousin").status_code == 400
    assert relate(client, ana_auth, ana["id"], "sibling").status_code == 400


def test_unknown_target_user(client, signup):
    _, ana_auth = signup("ana")
    response = relate(client, ana_auth, 999, "parent")
    assert response.status_code == 400


def test_inherit_relations(client, signup):
    ana, ana_auth = signup("ana")
    ben, _ = signup("ben")
    cai, _ = signup("cai")

    relate(client, ana_auth, cai["id"], "sibling")
    response = relate(client, ana_auth, ben["id"], "parent", inherit_relations=True)

    assert response.status_code == 200
    derived = response.json()["derived"]
    assert [(d["from_user_id"], d["to_user_id"], d["relation_type"]) for d in derived] == [
        (cai["id"], ben["id"], "parent"),
    ]

    # Ben now sees two children
    ben_tree = client.get("/api/family/tree", params={"user_id": ben["id"]}, headers=ana_auth)
    children = [m["id"] for m in ben_tree.json()["buckets"]["child"]]
    assert sorted(children) == sorted([ana["id"], cai["id"]])


def test_acting_for_a_relative(client, signup):
    ana, ana_auth = signup("ana")
    ben, _ = signup("ben")
    dee, _ = signup("dee")
    eli, _ = signup("eli")

    relate(client, ana_auth, ben["id"], "parent")

    # Ana fills in Ben's own parent
    response = relate(client, ana_auth, dee["id"], "parent", target_user_id=ben["id"])
    assert response.status_code == 200
    assert response.json()["from_user_id"] == ben["id"]

    # Eli is not related to Ana
    response = relate(client, ana_auth, dee["id"], "sibling", target_user_id=eli["id"])
    assert response.status_code == 403


def test_delete_relation(client, signup):
    ana, ana_auth = signup("ana")
    ben, ben_auth = signup("ben")
    cai, cai_auth = signup("cai")

    first = relate(client, ana_auth, ben["id"], "parent").json()
    relate(client, ana_auth, cai["id"], "sibling")

    # Not an endpoint of the edge
    assert client.delete(f"/api/family/{first['id']}", headers=cai_auth).status_code == 403

    # Either end may remove it
    response = client.delete(f"/api/family/{first['id']}", headers=ben_auth)
    assert response.status_code == 200
    assert response.json() == {"message": "Relation deleted successfully"}

    remaining = client.get("/api/family", headers=ana_auth).json()
    assert [r["to_user_id"] for r in remaining] == [cai["id"]]
    assert client.get("/api/family", headers=ben_auth).json() == []


def test_delete_missing_relation(client, signup):
    _, ana_auth = signup("ana")
    response = client.delete("/api/family/4242", headers=ana_auth)
    assert response.status_code == 404
    assert response.text == "Relation not found"


def test_family_tree(client, signup):
    ana, ana_auth = signup("ana")
    ben, ben_auth = signup("ben")
    cai, _ = signup("cai")
    dee, _ = signup("dee")

    relate(client, ana_auth, ben["id"], "parent")
    relate(client, ana_auth, cai["id"], "sibling")
    relate(client, ben_auth, dee["id"], "parent")

    tree = client.get("/api/family/tree", headers=ana_auth)
    assert tree.status_code == 200
    body = tree.json()

    assert body["root"]["id"] == ana["id"]
    assert [m["id"] for m in body["buckets"]["parent"]] == [ben["id"]]
    assert [m["id"] for m in body["buckets"]["sibling"]] == [cai["id"]]
    assert [m["id"] for m in body["buckets"]["grandparent"]] == [dee["id"]]
    assert body["buckets"]["cousin"] == []
    assert body["generations"]["child"] == 1

    from_ben = client.get("/api/family/tree", headers=ben_auth).json()
    assert [m["id"] for m in from_ben["buckets"]["child"]] == [ana["id"]]
    assert [m["id"] for m in from_ben["buckets"]["parent"]] == [dee["id"]]


def test_family_tree_unknown_user(client, signup):
    _, ana_auth = signup("ana")
    response = client.get("/api/family/tree", params={"user_id": 999}, headers=ana_auth)
    assert response.status_code == 404


def test_create_family_member(client, signup):
    ana, ana_auth = signup("ana")

    response = client.post(
        "/api/family/members",
        json={
            "username": "grandpa",
            "password": "secret123",
            "display_name": "Grandpa Joe",
            "relation_type": "grandparent",
        },
        headers=ana_auth,
    )
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["user"]["display_name"] == "Grandpa Joe"
    assert body["relation"]["from_user_id"] == ana["id"]
    assert body["relation"]["label"] == "grandparent"

    # New member can log in on their own
    login = client.post("/api/login", json={"username": "grandpa", "password": "secret123"})
    assert login.status_code == 200


def test_create_family_member_without_relation(client, signup):
    _, ana_auth = signup("ana")

    response = client.post(
        "/api/family/members",
        json={"username": "cousin_kim", "password": "secret123"},
        headers=ana_auth,
    )
    assert response.status_code == 200
    assert response.json()["relation"] is None
    assert client.get("/api/family", headers=ana_auth).json() == []


def test_create_family_member_bad_type_creates_nothing(client, signup):
    _, ana_auth = signup("ana")

    response = client.post(
        "/api/family/members",
        json={"username": "pal", "password": "secret123", "relation_type": "friend"},
        headers=ana_auth,
    )
    assert response.status_code == 400

    login = client.post("/api/login", json={"username": "pal", "password": "secret123"})
    assert login.status_code == 401


def test_ids_beyond_the_integer_column(client, signup):
    _, ana_auth = signup("ana")
    ben, _ = signup("ben")

    response = relate(client, ana_auth, 2**70, "parent")
    assert response.status_code == 400

    response = relate(client, ana_auth, ben["id"], "parent", target_user_id=2**64)
    assert response.status_code == 400

    response = client.delete(f"/api/family/{2**64}", headers=ana_auth)
    assert response.status_code == 400

    response = client.get("/api/family/tree", params={"user_id": 2**64}, headers=ana_auth)
    assert response.status_code == 400

    assert client.get("/api/family", headers=ana_auth).json() == []


def test_failed_relation_leaves_no_member_behind(client, signup, db, monkeypatch):
    _, ana_auth = signup("ana")

    def broken_commit(self):
        raise SQLAlchemyError("connection lost")

    monkeypatch.setattr(Session, "commit", broken_commit)

    response = client.post(
        "/api/family/members",
        json={"username": "grandpa", "password": "secret123", "relation_type": "grandparent"},
        headers=ana_auth,
    )
    assert response.status_code == 500

    monkeypatch.undo()
    assert db.query(User).filter(User.username == "grandpa").count() == 0
    assert db.query(FamilyRelation).count() == 0
