"""
Vote counters are aggregate-only: no per-user ledger is stored, so the
server applies every add/remove it receives. These tests pin that behaviour.
"""

from bson import ObjectId


def counts(database, post_id):
    post = database["posts"].find_one({"_id": ObjectId(post_id)})
    return post["upVotes"], post["downVotes"]


def test_upvote_add_then_remove_restores_counter(client, make_user, create_post, database):
    make_user("ann@example.com")
    post_id = create_post("ann@example.com")

    res = client.put(f"/posts/{post_id}/upvote/add")
    assert res.status_code == 200
    assert res.json()["upVotes"] == 1
    assert counts(database, post_id) == (1, 0)

    res = client.put(f"/posts/{post_id}/upvote/remove")
    assert res.status_code == 200
    assert counts(database, post_id) == (0, 0)


def test_switching_sides_is_a_remove_then_add(client, make_user, create_post, database):
    make_user("ann@example.com")
    post_id = create_post("ann@example.com")
    client.put(f"/posts/{post_id}/downvote/add")
    client.put(f"/posts/{post_id}/downvote/remove")
    res = client.put(f"/posts/{post_id}/upvote/add")
    assert res.json()["upVotes"] == 1
    assert res.json()["downVotes"] == 0


def test_repeated_adds_are_not_deduplicated(client, make_user, create_post, database):
    make_user("ann@example.com")
    post_id = create_post("ann@example.com")
    for _ in range(3):
        assert client.put(f"/posts/{post_id}/upvote/add").status_code == 200
    assert counts(database, post_id) == (3, 0)


def test_remove_from_zero_is_rejected(client, make_user, create_post, database):
    make_user("ann@example.com")
    post_id = create_post("ann@example.com")
    res = client.put(f"/posts/{post_id}/downvote/remove")
    assert res.status_code == 400
    assert res.json()["success"] is False
    assert counts(database, post_id) == (0, 0)


def test_vote_on_missing_post(client, make_user):
    make_user("ann@example.com")
    assert client.put(f"/posts/{ObjectId()}/upvote/add").status_code == 404
    assert client.put(f"/posts/{ObjectId()}/upvote/remove").status_code == 404


def test_vote_with_bad_id(client, make_user):
    make_user("ann@example.com")
    assert client.put("/posts/abc/upvote/add").status_code == 400


def test_unknown_vote_action_is_not_found(client, make_user, create_post, database):
    make_user("ann@example.com")
    post_id = create_post("ann@example.com")
    assert client.put(f"/posts/{post_id}/sidevote/add").status_code == 404
    assert client.put(f"/posts/{post_id}/upvote/toggle").status_code == 404
    assert counts(database, post_id) == (0, 0)


def test_vote_requires_session(client, make_user, create_post):
    make_user("ann@example.com")
    post_id = create_post("ann@example.com")
    client.cookies.clear()
    assert client.put(f"/posts/{post_id}/upvote/add").status_code == 401
