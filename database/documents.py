"""
Document store — schemaless JSON objects grouped by collection name.

A thin pass-through used by the ``/products`` and ``/offers`` routes.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import Document
from errors import StoreUnavailable

logger = logging.getLogger(__name__)


def _parse_id(doc_id: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(doc_id)
    except (ValueError, TypeError, AttributeError):
        return None


class DocumentStore:
    def __init__(self, session: AsyncSession, collection: str) -> None:
        self._session = session
        self.collection = collection

    async def _get(self, doc_id: str) -> Optional[Document]:
        uid = _parse_id(doc_id)
        if uid is None:
            return None
        result = await self._session.execute(
            select(Document).where(
                Document.collection == self.collection,
                Document.doc_id == uid,
            )
        )
        return result.scalar_one_or_none()

    async def insert_many(self, items: List[Dict[str, Any]]) -> List[str]:
        docs = [
            Document(
                doc_id=uuid.uuid4(),
                collection=self.collection,
                data={k: v for k, v in item.items() if k != "_id"},
            )
            for item in items
        ]
        self._session.add_all(docs)
        try:
            await self._session.commit()
        except SQLAlchemyError as exc:
            await self._session.rollback()
            logger.exception("Insert into %s failed", self.collection)
            raise StoreUnavailable() from exc
        logger.info("Inserted %d document(s) into %s", len(docs), self.collection)
        return [str(d.doc_id) for d in docs]

    async def find_all(self) -> List[Dict[str, Any]]:
        try:
            result = await self._session.execute(
                select(Document)
                .where(Document.collection == self.collection)
                .order_by(Document.created_at)
            )
        except SQLAlchemyError as exc:
            logger.exception("Listing %s failed", self.collection)
            raise StoreUnavailable() from exc
        return [d.to_dict() for d in result.scalars().all()]

    async def find_by_id(self, doc_id: str) -> Optional[Dict[str, Any]]:
        try:
            doc = await self._get(doc_id)
        except SQLAlchemyError as exc:
            logger.exception("Lookup in %s failed", self.collection)
            raise StoreUnavailable() from exc
        return doc.to_dict() if doc else None

    async def update_by_id(self, doc_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Shallow-merge ``fields`` into the document and return the new version."""
        try:
            doc = await self._get(doc_id)
            if doc is None:
                return None
            changes = {k: v for k, v in fields.items() if k != "_id"}
            doc.data = {**(doc.data or {}), **changes}
            await self._session.commit()
        except SQLAlchemyError as exc:
            await self._session.rollback()
            logger.exception("Update in %s failed", self.collection)
            raise StoreUnavailable() from exc
        return doc.to_dict()

    async def delete_by_id(self, doc_id: str) -> bool:
        try:
            doc = await self._get(doc_id)
            if doc is None:
                return False
            await self._session.delete(doc)
            await self._session.commit()
        except SQLAlchemyError as exc:
            await self._session.rollback()
            logger.exception("Delete in %s failed", self.collection)
            raise StoreUnavailable() from exc
        return True

    async def delete_all(self) -> int:
        try:
            result = await self._session.execute(
                delete(Document).where(Document.collection == self.collection)
            )
            await self._session.commit()
        except SQLAlchemyError as exc:
            await self._session.rollback()
            logger.exception("Bulk delete in %s failed", self.collection)
            raise StoreUnavailable() from exc
        logger.info("Deleted %d document(s) from %s", result.rowcount, self.collection)
        return result.rowcount
