"""
Derived counts computed at read time.

Per-post comment counts and per-tag post counts are each resolved with one
grouped aggregation rather than a query per item.
"""

from typing import Any, Dict, Iterable, List

from chatterbox.database import Database


def comment_counts(db: Database, post_ids: Iterable[str]) -> Dict[str, int]:
    ids = [str(p) for p in post_ids]
    if not ids:
        return {}
    pipeline = [
        {"$match": {"postId": {"$in": ids}}},
        {"$group": {"_id": "$postId", "count": {"$sum": 1}}},
    ]
    counts = {row["_id"]: row["count"] for row in db["comments"].aggregate(pipeline)}
    return {pid: counts.get(pid, 0) for pid in ids}


def attach_comment_counts(db: Database, posts: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    counts = comment_counts(db, [p["_id"] for p in posts])
    for p in posts:
        p["commentsCount"] = counts.get(str(p["_id"]), 0)
    return posts


def tag_post_counts(db: Database, labels: Iterable[str]) -> Dict[str, int]:
    labels = list(labels)
    if not labels:
        return {}
    pipeline = [
        {"$match": {"tags": {"$in": labels}}},
        {"$unwind": "$tags"},
        {"$match": {"tags": {"$in": labels}}},
        {"$group": {"_id": "$tags", "count": {"$sum": 1}}},
    ]
    counts = {row["_id"]: row["count"] for row in db["posts"].aggregate(pipeline)}
    return {label: counts.get(label, 0) for label in labels}


def user_stats(db: Database, email: str) -> Dict[str, int]:
    post_ids = [str(p["_id"]) for p in db["posts"].find({"authorEmail": email}, {"_id": 1})]
    comments = sum(comment_counts(db, post_ids).values())
    return {"postsCount": len(post_ids), "commentsCount": comments}


def site_stats(db: Database) -> Dict[str, int]:
    # collection metadata counts, not exact filtered counts
    return {
        "usersCount": db["users"].estimated_document_count(),
        "postsCount": db["posts"].estimated_document_count(),
        "commentsCount": db["comments"].estimated_document_count(),
    }
