import logging
import re
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from pymongo.errors import DuplicateKeyError

from chatterbox.aggregation import site_stats
from chatterbox.auth import require_admin
from chatterbox.database import Database, Page, get_db, page_params
from chatterbox.errors import ValidationError, store_errors
from chatterbox.policies import Identity
from chatterbox.responses import deleted, inserted, listing, updated
from chatterbox.schemas import Announcement, Role, Tag, oid

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


# ---------- Schemas (API layer) ----------

class Promotion(BaseModel):
    id: str = Field(..., min_length=1)


class TagCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    tag: str = Field(..., min_length=1)


class AnnouncementCreate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)

    author_name: str = Field(..., min_length=1)
    author_image: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)


# ---------- Stats & users ----------

@router.get("/stats")
def stats(db: Database = Depends(get_db)):
    with store_errors("Failed to Get Stats"):
        counts = site_stats(db)
    return {"success": True, **counts}


@router.get("/users")
def list_users(
    page: Page = Depends(page_params(10)),
    username: str = Query(""),
    db: Database = Depends(get_db),
):
    query = {"username": {"$regex": re.escape(username), "$options": "i"}}
    with store_errors("Server Error"):
        items, count = db.page("users", query, page)
    return listing(items, count)


@router.put("/users/make-admin")
def make_admin(data: Promotion, admin: Identity = Depends(require_admin), db: Database = Depends(get_db)):
    query = {"_id": oid(data.id, "User")}
    with store_errors("Failed to Update User Information"):
        res = db["users"].update_one(query, {"$set": {"role": Role.ADMIN.value}})
    body = updated(res, "User not Found!", "User Data wasn't updated")
    logger.info("User %s promoted to admin by %s", data.id, admin.email)
    return body


# ---------- Moderation ----------

@router.get("/reported-comments")
def reported_comments(page: Page = Depends(page_params(10)), db: Database = Depends(get_db)):
    with store_errors("Failed to Get Comments"):
        items, count = db.page("comments", {"reported": True}, page)
    return listing(items, count)


@router.delete("/comments/{comment_id}")
def delete_comment(comment_id: str, db: Database = Depends(get_db)):
    query = {"_id": oid(comment_id, "Item")}
    with store_errors("Failed to Delete Comment"):
        res = db["comments"].delete_one(query)
    return deleted(res, "Comment not Found!")


# ---------- Tags ----------

@router.post("/tags")
def create_tag(data: TagCreate, db: Database = Depends(get_db)):
    with store_errors("Failed to Insert Tag"):
        if db["tags"].find_one({"tag": data.tag}):
            raise ValidationError("Tag already Exists!")
        try:
            new_id = db.create_document("tags", Tag(tag=data.tag).model_dump())
        except DuplicateKeyError:
            raise ValidationError("Tag already Exists!")
    return inserted(new_id)


@router.delete("/tags/{tag_id}")
def delete_tag(tag_id: str, db: Database = Depends(get_db)):
    query = {"_id": oid(tag_id)}
    with store_errors("Failed to Delete Tag"):
        res = db["tags"].delete_one(query)
    return deleted(res, "Tag not Found!")


# ---------- Announcements ----------

@router.post("/announcements")
def create_announcement(data: AnnouncementCreate, db: Database = Depends(get_db)):
    announcement = Announcement(**data.model_dump(), created_at=datetime.now(timezone.utc))
    with store_errors("Server Error Occurred"):
        new_id = db.create_document("announcements", announcement)
    return inserted(new_id)


@router.delete("/announcements/{announcement_id}")
def delete_announcement(announcement_id: str, db: Database = Depends(get_db)):
    query = {"_id": oid(announcement_id)}
    with store_errors("Failed to Delete Announcement"):
        res = db["announcements"].delete_one(query)
    return deleted(res, "Announcement not Found!")
