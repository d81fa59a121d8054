import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from chatterbox.auth import get_current_email, get_identity
from chatterbox.database import Database, Page, get_db, page_params
from chatterbox.errors import NotFoundError, ValidationError, store_errors
from chatterbox.policies import Identity, can_act_as, ensure
from chatterbox.responses import inserted, listing
from chatterbox.schemas import Comment, Feedback, oid

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/comments", tags=["comments"])


class CommentCreate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)

    author_email: str = Field(..., min_length=1)
    author_name: str = Field(..., min_length=1)
    author_image: str = Field(..., min_length=1)
    post_id: str = Field(..., min_length=1)
    comment: str = Field(..., min_length=1)


class Report(BaseModel):
    feedback: Feedback


@router.post("")
def create_comment(
    data: CommentCreate,
    identity: Identity = Depends(get_identity),
    db: Database = Depends(get_db),
):
    post_id = oid(data.post_id, "Post")
    ensure(can_act_as(identity, data.author_email))

    with store_errors("Server Error Occurred"):
        if not db["posts"].find_one({"_id": post_id}, {"_id": 1}):
            raise NotFoundError("Post not Found!")
        # stored in canonical form so counts and cascades match str(post["_id"])
        comment = Comment(
            **data.model_dump(exclude={"post_id"}), post_id=str(post_id), created_at=datetime.now(timezone.utc)
        )
        new_id = db.create_document("comments", comment)
    return inserted(new_id)


@router.get("/{post_id}")
def list_comments(
    post_id: str,
    page: Page = Depends(page_params(10)),
    db: Database = Depends(get_db),
):
    with store_errors("Server Error"):
        items, count = db.page("comments", {"postId": str(oid(post_id, "Post"))}, page)
    return listing(items, count)


@router.post("/{comment_id}/report")
def report_comment(
    comment_id: str,
    data: Report,
    email: str = Depends(get_current_email),
    db: Database = Depends(get_db),
):
    """Flag a comment for moderation. A comment can be reported only once."""
    query = {"_id": oid(comment_id, "Comment")}
    comment = db["comments"].find_one(query)
    if not comment or not db["posts"].find_one({"_id": oid(comment.get("postId"), "Post")}, {"_id": 1}):
        raise NotFoundError("Comment not Found!")
    if comment.get("reported"):
        raise ValidationError("Comment already reported")

    with store_errors("Failed to Insert report"):
        res = db["comments"].update_one(
            {**query, "reported": {"$ne": True}},
            {"$set": {"reported": True, "feedback": data.feedback.value}},
        )
    if res.modified_count == 0:
        # lost a race with a concurrent report
        raise ValidationError("Comment already reported")
    logger.info("Comment %s reported as %s by %s", comment_id, data.feedback.value, email)
    return {"success": True, "matchedCount": res.matched_count, "modifiedCount": res.modified_count}
