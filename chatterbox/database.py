"""
MongoDB access for the API.

A single Database object is built with the app and opened/closed by the
app's startup and shutdown hooks; handlers receive it through ``get_db``.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from fastapi import Query, Request
from pydantic import BaseModel
from pymongo import ASCENDING, DESCENDING, MongoClient

from chatterbox.config import Settings
from chatterbox.errors import StoreError

logger = logging.getLogger(__name__)

SortSpec = Sequence[Tuple[str, int]]

NEWEST_FIRST: SortSpec = [("createdAt", DESCENDING), ("_id", DESCENDING)]


class Page(BaseModel):
    skip: int = 0
    limit: Optional[int] = None


class Database:
    def __init__(self, uri: str, name: str, client: Optional[Any] = None):
        self.uri = uri
        self.name = name
        self.client = client
        self._owns_client = client is None
        self.db = None

    def connect(self) -> None:
        if self.client is None:
            self.client = MongoClient(self.uri, serverSelectionTimeoutMS=5000)
        self.db = self.client[self.name]
        logger.info("Using database %r", self.name)

    def close(self) -> None:
        if self._owns_client and self.client is not None:
            self.client.close()
            self.client = None
        self.db = None
        logger.info("Database connection closed")

    @property
    def connected(self) -> bool:
        return self.db is not None

    def __getitem__(self, collection: str):
        if self.db is None:
            raise StoreError("Database not available")
        return self.db[collection]

    def list_collection_names(self) -> List[str]:
        if self.db is None:
            raise StoreError("Database not available")
        return self.db.list_collection_names()

    def ensure_indexes(self) -> None:
        self["users"].create_index("email", unique=True)
        self["tags"].create_index("tag", unique=True)
        self["posts"].create_index([("authorEmail", ASCENDING)])
        self["posts"].create_index([("createdAt", DESCENDING)])
        self["comments"].create_index([("postId", ASCENDING)])
        self["comments"].create_index([("reported", ASCENDING)])
        logger.info("Indexes ensured")

    def create_document(self, collection: str, data: Union[BaseModel, Dict[str, Any]]) -> str:
        if isinstance(data, BaseModel):
            doc = data.model_dump(by_alias=True, exclude_none=True)
        else:
            doc = dict(data)
        doc.setdefault("createdAt", datetime.now(timezone.utc))
        res = self[collection].insert_one(doc)
        return str(res.inserted_id)

    def get_documents(
        self,
        collection: str,
        filter_dict: Optional[Dict[str, Any]] = None,
        skip: int = 0,
        limit: Optional[int] = None,
        sort: Optional[SortSpec] = None,
    ) -> List[Dict[str, Any]]:
        cursor = self[collection].find(filter_dict or {})
        if sort:
            cursor = cursor.sort(list(sort))
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return list(cursor)

    def page(
        self,
        collection: str,
        filter_dict: Optional[Dict[str, Any]],
        page: Page,
        sort: Optional[SortSpec] = NEWEST_FIRST,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """Return one page of documents and the total matching the same filter."""
        items = self.get_documents(collection, filter_dict, page.skip, page.limit, sort)
        total = self[collection].count_documents(filter_dict or {})
        return items, total


def get_db(request: Request) -> Database:
    return request.app.state.database


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def page_params(default_limit: Optional[int]):
    """Build a dependency reading ``skip``/``limit`` with a per-resource default."""

    def dependency(
        skip: int = Query(0, ge=0),
        limit: Optional[int] = Query(default_limit, ge=1),
    ) -> Page:
        return Page(skip=skip, limit=limit)

    return dependency
