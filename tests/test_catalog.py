def test_tags_with_post_counts(client, make_user, create_post, database):
    make_user("root@example.com", role="admin")
    for label in ["python", "rust", "go"]:
        client.post("/admin/tags", json={"tag": label})
    create_post("root@example.com", tags=["python", "rust"])
    create_post("root@example.com", tags=["python"])
    create_post("root@example.com", tags=["pythonic"])

    client.cookies.clear()
    body = client.get("/tags").json()
    assert body["success"] is True
    assert body["count"] == 3
    counts = {t["tag"]: t["postCount"] for t in body["result"]}
    assert counts == {"python": 2, "rust": 1, "go": 0}


def test_tags_empty(client):
    assert client.get("/tags").json() == {"success": True, "result": [], "count": 0}


def test_announcements_listing_and_count(client, make_user):
    make_user("root@example.com", role="admin")
    for title in ["First", "Second"]:
        client.post(
            "/admin/announcements",
            json={"authorName": "Root", "authorImage": "r.png", "title": title, "description": "..."},
        )

    client.cookies.clear()
    body = client.get("/announcements").json()
    assert body["count"] == 2
    assert [a["title"] for a in body["result"]] == ["Second", "First"]

    limited = client.get("/announcements", params={"limit": 1}).json()
    assert len(limited["result"]) == 1

    assert client.get("/announcements/count").json() == {"success": True, "count": 2}


def test_listing_limit_is_not_capped(client, make_user):
    make_user("root@example.com", role="admin")
    for i in range(3):
        client.post("/admin/tags", json={"tag": f"t{i}"})
    res = client.get("/tags", params={"limit": 500})
    assert res.status_code == 200
    assert res.json()["count"] == 3
    assert client.get("/announcements", params={"limit": 200}).status_code == 200
