"""Public listings: tags and site announcements."""

from fastapi import APIRouter, Depends

from chatterbox.aggregation import tag_post_counts
from chatterbox.database import Database, Page, get_db, page_params
from chatterbox.errors import store_errors
from chatterbox.responses import listing

router = APIRouter(tags=["catalog"])


@router.get("/tags")
def list_tags(page: Page = Depends(page_params(None)), db: Database = Depends(get_db)):
    with store_errors("Server Error"):
        items, count = db.page("tags", {}, page, sort=[("tag", 1)])
        counts = tag_post_counts(db, [t["tag"] for t in items])
    for t in items:
        t["postCount"] = counts.get(t["tag"], 0)
    return listing(items, count)


@router.get("/announcements")
def list_announcements(page: Page = Depends(page_params(None)), db: Database = Depends(get_db)):
    with store_errors("Server Error"):
        items, count = db.page("announcements", {}, page)
    return listing(items, count)


@router.get("/announcements/count")
def count_announcements(db: Database = Depends(get_db)):
    with store_errors("Server Error"):
        count = db["announcements"].estimated_document_count()
    return {"success": True, "count": count}
