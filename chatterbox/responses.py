"""Success envelopes built from driver results."""

from typing import Any, Dict, List

from pymongo.results import DeleteResult, UpdateResult

from chatterbox.errors import NotFoundError, ValidationError
from chatterbox.schemas import serialize


def inserted(inserted_id: str) -> Dict[str, Any]:
    return {"success": True, "acknowledged": True, "insertedId": inserted_id}


def updated(res: UpdateResult, not_found: str, not_updated: str) -> Dict[str, Any]:
    if res.matched_count == 0:
        raise NotFoundError(not_found)
    if res.modified_count == 0:
        raise ValidationError(not_updated)
    return {"success": True, "matchedCount": res.matched_count, "modifiedCount": res.modified_count}


def deleted(res: DeleteResult, not_found: str) -> Dict[str, Any]:
    if res.deleted_count == 0:
        raise NotFoundError(not_found)
    return {"success": True, "deletedCount": res.deleted_count}


def listing(items: List[Dict[str, Any]], count: int) -> Dict[str, Any]:
    return {"success": True, "result": [serialize(i) for i in items], "count": count}
