"""
Database Schemas for Chatter Box

Each Pydantic model maps to a MongoDB collection:
- User -> "users"
- Post -> "posts"
- Comment -> "comments"
- Tag -> "tags"
- Announcement -> "announcements"

Attributes are snake_case in Python and camelCase on the wire and in storage
(``author_email`` is stored as ``authorEmail``).
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from chatterbox.errors import ValidationError


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class Membership(str, Enum):
    FREE = "Free"
    PREMIUM = "Premium"


class Badge(str, Enum):
    BRONZE = "bronze"
    GOLD = "gold"


class Feedback(str, Enum):
    INAPPROPRIATE = "Inappropriate"
    SPAM = "Spam"
    OFF_TOPIC = "Off-Topic"


class Document(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        validate_default=True,
        str_strip_whitespace=True,
    )


class User(Document):
    email: str = Field(..., min_length=1, description="Unique login identity")
    username: str = Field(..., min_length=1, description="Display name")
    role: Role = Role.USER
    membership_status: Membership = Membership.FREE
    badge: Badge = Badge.BRONZE
    about_me: Optional[str] = Field(None, description="Optional bio")
    created_at: Optional[datetime] = None


class Post(Document):
    author_email: str = Field(..., min_length=1)
    author_name: str = Field(..., min_length=1)
    author_image: str = Field(..., min_length=1, description="Avatar URL")
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    tags: List[str] = Field(..., min_length=1, description="Topic labels, order preserved")
    up_votes: int = Field(0, ge=0)
    down_votes: int = Field(0, ge=0)
    created_at: Optional[datetime] = None


class Comment(Document):
    author_email: str = Field(..., min_length=1)
    author_name: str = Field(..., min_length=1)
    author_image: str = Field(..., min_length=1)
    post_id: str = Field(..., min_length=1, description="Parent post id as string")
    comment: str = Field(..., min_length=1, description="Comment text")
    reported: Optional[bool] = None
    feedback: Optional[Feedback] = None
    created_at: Optional[datetime] = None


class Tag(Document):
    tag: str = Field(..., min_length=1)


class Announcement(Document):
    author_name: str = Field(..., min_length=1)
    author_image: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    created_at: Optional[datetime] = None


def oid(id_str: str, what: str = "Item") -> ObjectId:
    try:
        return ObjectId(str(id_str))
    except (InvalidId, TypeError):
        raise ValidationError(f"Invalid {what} id Provided")


def serialize(doc: Dict[str, Any]) -> Dict[str, Any]:
    if not doc:
        return doc
    d = {**doc}
    for k, v in list(d.items()):
        if isinstance(v, ObjectId):
            d[k] = str(v)
        elif isinstance(v, datetime):
            d[k] = v.isoformat()
    return d
