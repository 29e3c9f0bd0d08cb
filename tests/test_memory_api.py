"""Memories attached to a user's page."""


def write_memory(client, headers, **fields):
    payload = {"title": "First steps", "content": "In the garden, June."}
    payload.update(fields)
    return client.post("/api/memories", json=payload, headers=headers)


def test_write_and_read(client, signup):
    ana, ana_auth = signup("ana")
    _, ben_auth = signup("ben")

    first = write_memory(client, ana_auth, memory_date="1985-06-01T00:00:00").json()
    second = write_memory(client, ana_auth, title="School", content="Day one").json()

    assert first["user_id"] == ana["id"]
    assert first["memory_date"].startswith("1985-06-01")

    # Anyone signed in may read them, newest first
    listed = client.get(f"/api/memories/{ana['id']}", headers=ben_auth).json()
    assert [m["id"] for m in listed] == [second["id"], first["id"]]


def test_title_and_content_required(client, signup):
    _, auth = signup("ana")
    assert write_memory(client, auth, title="  ").status_code == 400
    assert write_memory(client, auth, content="").status_code == 400
    assert client.post("/api/memories", json={"title": "x"}, headers=auth).status_code == 400


def test_unknown_media_rejected(client, signup):
    _, auth = signup("ana")
    response = write_memory(client, auth, media_id=404)
    assert response.status_code == 400
    assert response.text == "Media item does not exist"


def test_unknown_user(client, signup):
    _, auth = signup("ana")
    assert client.get("/api/memories/999", headers=auth).status_code == 404


def test_delete_memory(client, signup):
    ana, ana_auth = signup("ana")
    _, ben_auth = signup("ben")
    memory = write_memory(client, ana_auth).json()

    assert client.delete(f"/api/memories/{memory['id']}", headers=ben_auth).status_code == 403

    response = client.delete(f"/api/memories/{memory['id']}", headers=ana_auth)
    assert response.status_code == 200
    assert client.get(f"/api/memories/{ana['id']}", headers=ana_auth).json() == []
    assert client.delete(f"/api/memories/{memory['id']}", headers=ana_auth).status_code == 404
