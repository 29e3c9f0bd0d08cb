"""Shared albums."""

PHOTO = ("cake.png", b"\x89PNG fake", "image/png")


def create_album(client, headers, name="Birthdays", **extra):
    return client.post("/api/albums", json={"name": name, **extra}, headers=headers)


def upload_photo(client, headers, **fields):
    response = client.post(
        "/api/media",
        data={"type": "photo", **fields},
        files={"file": PHOTO},
        headers=headers,
    )
    assert response.status_code == 200, response.text
    return response.json()


def test_create_and_list(client, signup):
    ana, auth = signup("ana")

    response = create_album(client, auth, description="Every year", is_shared=True)
    assert response.status_code == 200
    album = response.json()
    assert album["created_by"] == ana["id"]
    assert album["is_shared"] is True
    assert album["members"] == []
    assert album["media_items"] == []

    listed = client.get("/api/albums", headers=auth).json()
    assert [a["id"] for a in listed] == [album["id"]]


def test_blank_name_rejected(client, signup):
    _, auth = signup("ana")
    assert create_album(client, auth, name="   ").status_code == 400


def test_members(client, signup):
    ana, ana_auth = signup("ana")
    ben, ben_auth = signup("ben")
    album = create_album(client, ana_auth).json()

    response = client.post(f"/api/albums/{album['id']}/members", json={"user_id": ben["id"]}, headers=ana_auth)
    assert response.status_code == 200
    assert response.json()["can_edit"] is False

    # Shared albums show up for members too
    assert [a["id"] for a in client.get("/api/albums", headers=ben_auth).json()] == [album["id"]]

    again = client.post(f"/api/albums/{album['id']}/members", json={"user_id": ben["id"]}, headers=ana_auth)
    assert again.status_code == 400

    creator = client.post(f"/api/albums/{album['id']}/members", json={"user_id": ana["id"]}, headers=ana_auth)
    assert creator.status_code == 400

    ghost = client.post(f"/api/albums/{album['id']}/members", json={"user_id": 999}, headers=ana_auth)
    assert ghost.status_code == 400

    # Only the creator manages members
    by_member = client.delete(f"/api/albums/{album['id']}/members/{ben['id']}", headers=ben_auth)
    assert by_member.status_code == 403

    removed = client.delete(f"/api/albums/{album['id']}/members/{ben['id']}", headers=ana_auth)
    assert removed.status_code == 200
    assert client.get("/api/albums", headers=ben_auth).json() == []


def test_missing_album(client, signup):
    _, auth = signup("ana")
    assert client.post("/api/albums/55/members", json={"user_id": 1}, headers=auth).status_code == 404
    assert client.delete("/api/albums/55", headers=auth).status_code == 404


def test_media_in_albums(client, signup):
    ana, ana_auth = signup("ana")
    ben, ben_auth = signup("ben")
    cai, cai_auth = signup("cai")
    album = create_album(client, ana_auth).json()
    client.post(
        f"/api/albums/{album['id']}/members",
        json={"user_id": ben["id"], "can_edit": True},
        headers=ana_auth,
    )

    # Editors may file their own uploads, outsiders may not
    photo = upload_photo(client, ben_auth)
    assert client.post(f"/api/albums/{album['id']}/media/{photo['id']}", headers=cai_auth).status_code == 403
    assert client.post(f"/api/albums/{album['id']}/media/{photo['id']}", headers=ben_auth).status_code == 200

    # Someone else's media cannot be filed
    anas = upload_photo(client, ana_auth)
    assert client.post(f"/api/albums/{album['id']}/media/{anas['id']}", headers=ben_auth).status_code == 404

    listed = client.get("/api/albums", headers=ana_auth).json()
    assert [m["id"] for m in listed[0]["media_items"]] == [photo["id"]]

    in_album = client.get("/api/media", params={"user_id": ben["id"], "album_id": album["id"]}, headers=ana_auth)
    assert [m["id"] for m in in_album.json()] == [photo["id"]]

    response = client.delete(f"/api/albums/{album['id']}/media/{photo['id']}", headers=ana_auth)
    assert response.status_code == 200
    again = client.delete(f"/api/albums/{album['id']}/media/{photo['id']}", headers=ana_auth)
    assert again.status_code == 404


def test_upload_straight_into_album(client, signup):
    _, ana_auth = signup("ana")
    _, ben_auth = signup("ben")
    album = create_album(client, ana_auth).json()

    photo = upload_photo(client, ana_auth, album_id=str(album["id"]))
    assert photo["album_id"] == album["id"]

    response = client.post(
        "/api/media",
        data={"type": "photo", "album_id": str(album["id"])},
        files={"file": PHOTO},
        headers=ben_auth,
    )
    assert response.status_code == 403


def test_delete_album_keeps_media(client, signup):
    ana, ana_auth = signup("ana")
    _, ben_auth = signup("ben")
    album = create_album(client, ana_auth).json()
    photo = upload_photo(client, ana_auth, album_id=str(album["id"]))

    assert client.delete(f"/api/albums/{album['id']}", headers=ben_auth).status_code == 403

    response = client.delete(f"/api/albums/{album['id']}", headers=ana_auth)
    assert response.status_code == 200
    assert client.get("/api/albums", headers=ana_auth).json() == []

    media = client.get("/api/media", params={"uploaded": True}, headers=ana_auth).json()
    assert [m["id"] for m in media] == [photo["id"]]
    assert media[0]["album_id"] is None
