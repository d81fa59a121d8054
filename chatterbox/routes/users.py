import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from pymongo.errors import DuplicateKeyError

from chatterbox.aggregation import attach_comment_counts, user_stats
from chatterbox.auth import clear_session_cookie, get_current_email, get_identity, set_session_cookie
from chatterbox.config import Settings
from chatterbox.database import Database, Page, get_db, get_settings, page_params
from chatterbox.errors import NotFoundError, store_errors
from chatterbox.policies import Identity, can_update_profile, ensure
from chatterbox.responses import inserted, listing, updated
from chatterbox.schemas import Badge, Membership, User, oid, serialize

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users"])


# ---------- Schemas (API layer) ----------

class Credentials(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: str = Field(..., min_length=1)


class Registration(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: str = Field(..., min_length=1)
    username: str = Field(..., min_length=1)


class ProfileUpdate(BaseModel):
    about_me: str = Field(..., min_length=1, alias="aboutMe")


# ---------- Session ----------

@router.post("/authentication")
def authenticate(data: Credentials, response: Response, settings: Settings = Depends(get_settings)):
    set_session_cookie(response, data.email, settings)
    return {"success": True}


@router.get("/logout")
def logout(response: Response, settings: Settings = Depends(get_settings)):
    clear_session_cookie(response, settings)
    return {"success": True}


# ---------- Accounts ----------

@router.post("/users")
def register(data: Registration, db: Database = Depends(get_db), settings: Settings = Depends(get_settings)):
    user = User(email=data.email, username=data.username, created_at=datetime.now(timezone.utc))
    new_id = None
    with store_errors("Failed to Create User"):
        if not db["users"].find_one({"email": user.email}):
            try:
                new_id = db.create_document("users", user)
            except DuplicateKeyError:
                new_id = None

    # an existing account still gets a session, same as /authentication
    if new_id is None:
        response = JSONResponse(status_code=400, content={"success": False, "message": "User already Exists!"})
    else:
        logger.info("Registered user %s", user.email)
        response = JSONResponse(content=inserted(new_id))
    set_session_cookie(response, user.email, settings)
    return response


@router.get("/me")
def me(email: str = Depends(get_current_email), db: Database = Depends(get_db)):
    user = db["users"].find_one({"email": email})
    if not user:
        raise NotFoundError("User not Found!")
    return {"success": True, **serialize(user)}


@router.put("/users/{user_id}")
def update_profile(
    user_id: str,
    data: ProfileUpdate,
    identity: Identity = Depends(get_identity),
    db: Database = Depends(get_db),
):
    query = {"_id": oid(user_id, "User")}
    user = db["users"].find_one(query)
    if not user:
        raise NotFoundError("User not Found!")
    ensure(can_update_profile(identity, user))
    with store_errors("Failed to Update User Information"):
        res = db["users"].update_one(query, {"$set": {"aboutMe": data.about_me}})
    return updated(res, "User not Found!", "User Data wasn't updated")


# ---------- Caller's own data ----------

@router.get("/user/stats")
def my_stats(email: str = Depends(get_current_email), db: Database = Depends(get_db)):
    with store_errors("Failed to Parse Data"):
        stats = user_stats(db, email)
    return {"success": True, **stats}


@router.get("/user/posts")
def my_posts(
    page: Page = Depends(page_params(10)),
    email: str = Depends(get_current_email),
    db: Database = Depends(get_db),
):
    with store_errors("Failed to Parse Data"):
        items, count = db.page("posts", {"authorEmail": email}, page)
        attach_comment_counts(db, items)
    return listing(items, count)


@router.put("/user/premium")
def become_premium(email: str = Depends(get_current_email), db: Database = Depends(get_db)):
    with store_errors("Server Error"):
        res = db["users"].update_one(
            {"email": email},
            {"$set": {"membershipStatus": Membership.PREMIUM.value, "badge": Badge.GOLD.value}},
        )
    return updated(res, "User not Found!", "Failed to Be Premium")
