import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from chatterbox.aggregation import attach_comment_counts, comment_counts
from chatterbox.auth import get_current_email, get_identity
from chatterbox.config import Settings
from chatterbox.database import Database, Page, get_db, get_settings, page_params
from chatterbox.errors import NotFoundError, ValidationError, store_errors
from chatterbox.policies import (
    Identity,
    can_act_as,
    can_create_post,
    can_delete_post,
    can_edit_post,
    ensure,
)
from chatterbox.responses import deleted, inserted, listing, updated
from chatterbox.schemas import Post, oid, serialize

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["posts"])

VOTE_FIELDS = {"upvote": "upVotes", "downvote": "downVotes"}
VOTE_DELTAS = {"add": 1, "remove": -1}


# ---------- Schemas (API layer) ----------

class PostCreate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)

    author_email: str = Field(..., min_length=1)
    author_name: str = Field(..., min_length=1)
    author_image: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    tags: List[str] = Field(..., min_length=1)


class PostUpdate(BaseModel):
    """Author fields are accepted but ignored; they never change after creation."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    title: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None


def clean_tags(tags: List[str]) -> List[str]:
    cleaned = []
    for t in tags:
        t = t.strip()
        if t and t not in cleaned:
            cleaned.append(t)
    return cleaned


def tag_filter(tag: Optional[str]) -> Dict[str, Any]:
    # case-insensitive substring match against any tag
    if not tag:
        return {}
    return {"tags": {"$regex": re.escape(tag), "$options": "i"}}


def find_post(db: Database, post_id: str) -> Dict[str, Any]:
    post = db["posts"].find_one({"_id": oid(post_id, "Post")})
    if not post:
        raise NotFoundError("Post not Found!")
    return post


# ---------- Posts ----------

@router.post("")
def create_post(
    data: PostCreate,
    identity: Identity = Depends(get_identity),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    tags = clean_tags(data.tags)
    if not tags:
        raise ValidationError("Invalid Body Request")
    ensure(can_act_as(identity, data.author_email))

    with store_errors("Server Error Occurred"):
        existing = db["posts"].count_documents({"authorEmail": identity.email})
        ensure(
            can_create_post(identity, existing, settings.free_post_limit),
            f"You can Only Create {settings.free_post_limit} Posts with Free Membership",
        )
        post = Post(**data.model_dump(exclude={"tags"}), tags=tags, created_at=datetime.now(timezone.utc))
        new_id = db.create_document("posts", post)

    logger.info("Post %s created by %s", new_id, identity.email)
    return inserted(new_id)


@router.get("")
def list_posts(
    page: Page = Depends(page_params(5)),
    sort_by_vote: bool = Query(False, alias="sortByVote"),
    tag: Optional[str] = None,
    db: Database = Depends(get_db),
):
    query = tag_filter(tag)
    pipeline: List[Dict[str, Any]] = []
    if query:
        pipeline.append({"$match": query})
    if sort_by_vote:
        pipeline.append({"$addFields": {"voteDifference": {"$subtract": ["$upVotes", "$downVotes"]}}})
        pipeline.append({"$sort": {"voteDifference": -1, "createdAt": -1, "_id": -1}})
    else:
        pipeline.append({"$sort": {"createdAt": -1, "_id": -1}})
    if page.skip:
        pipeline.append({"$skip": page.skip})
    if page.limit:
        pipeline.append({"$limit": page.limit})

    with store_errors("Server Error"):
        count = db["posts"].count_documents(query)
        items = list(db["posts"].aggregate(pipeline))
        attach_comment_counts(db, items)
    for item in items:
        item.pop("voteDifference", None)
    return listing(items, count)


@router.get("/{post_id}")
def get_post(post_id: str, db: Database = Depends(get_db)):
    post = find_post(db, post_id)
    counts = comment_counts(db, [post["_id"]])
    return {"success": True, **serialize(post), "commentsCount": counts[str(post["_id"])]}


@router.put("/{post_id}")
def update_post(
    post_id: str,
    data: PostUpdate,
    identity: Identity = Depends(get_identity),
    db: Database = Depends(get_db),
):
    post = find_post(db, post_id)
    ensure(can_edit_post(identity, post))

    changes: Dict[str, Any] = {}
    if data.title:
        changes["title"] = data.title
    if data.description:
        changes["description"] = data.description
    if data.tags:
        tags = clean_tags(data.tags)
        if tags:
            changes["tags"] = tags
    if not changes:
        raise ValidationError("Invalid Body Request")

    with store_errors("Failed to Update Post"):
        res = db["posts"].update_one({"_id": post["_id"]}, {"$set": changes})
    return updated(res, "Post not Found!", "Post Data wasn't updated")


@router.delete("/{post_id}")
def delete_post(
    post_id: str,
    identity: Identity = Depends(get_identity),
    db: Database = Depends(get_db),
):
    post = find_post(db, post_id)
    ensure(can_delete_post(identity, post))

    with store_errors("Failed to Delete Item"):
        res = db["posts"].delete_one({"_id": post["_id"]})
        body = deleted(res, "Post not Found!")
        removed = db["comments"].delete_many({"postId": str(post["_id"])})

    logger.info("Post %s deleted by %s with %d comments", post["_id"], identity.email, removed.deleted_count)
    return {**body, "deletedComments": removed.deleted_count}


# ---------- Voting ----------

@router.put("/{post_id}/{vote_type}/{update_type}")
def vote(
    post_id: str,
    vote_type: str,
    update_type: str,
    email: str = Depends(get_current_email),
    db: Database = Depends(get_db),
):
    """
    Adjust the aggregate up/down counter by one.

    No per-user vote record is kept: the client pairs a ``remove`` on one
    direction with an ``add`` on the other when the caller switches sides.
    """
    if vote_type not in VOTE_FIELDS or update_type not in VOTE_DELTAS:
        raise NotFoundError("Not Found")
    field = VOTE_FIELDS[vote_type]
    delta = VOTE_DELTAS[update_type]

    query: Dict[str, Any] = {"_id": oid(post_id, "Post")}
    if delta < 0:
        query[field] = {"$gt": 0}

    with store_errors("Failed to Update Post"):
        res = db["posts"].update_one(query, {"$inc": {field: delta}})
        if res.matched_count == 0:
            # distinguish a missing post from a counter already at zero
            find_post(db, post_id)
            raise ValidationError(f"No {vote_type} to remove")
        post = db["posts"].find_one({"_id": query["_id"]})

    return {
        "success": True,
        "matchedCount": res.matched_count,
        "modifiedCount": res.modified_count,
        "upVotes": post.get("upVotes", 0),
        "downVotes": post.get("downVotes", 0),
    }
