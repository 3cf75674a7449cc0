"""
CRUD routes for schemaless document collections (``/products``, ``/offers``).

Each route is a pass-through to ``DocumentStore``.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Callable, Dict, List

from fastapi import APIRouter, Body, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from auth.dependencies import db_session
from database.documents import DocumentStore


@lru_cache
def document_store_provider(collection: str) -> Callable[..., DocumentStore]:
    def _provide(session: AsyncSession = Depends(db_session)) -> DocumentStore:
        return DocumentStore(session, collection)

    _provide.__name__ = f"get_{collection}_store"
    return _provide


def build_collection_router(collection: str, label: str) -> APIRouter:
    """
    Build the router for one collection.

    ``collection`` is the URL segment and storage key (``"products"``),
    ``label`` the singular used in messages (``"Product"``).
    """
    router = APIRouter(prefix=f"/{collection}", tags=[collection])
    get_store = document_store_provider(collection)
    not_found = f"{label} not found"

    @router.post("", status_code=status.HTTP_201_CREATED)
    async def create_many(
        items: Any = Body(None),
        store: DocumentStore = Depends(get_store),
    ) -> Any:
        if (
            not isinstance(items, list)
            or not items
            or not all(isinstance(i, dict) for i in items)
        ):
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={"error": f"Request body must be an array of {collection}"},
            )
        ids = await store.insert_many(items)
        return {
            "message": f"{label}s added successfully",
            "insertedCount": len(ids),
            "insertedIds": ids,
        }

    @router.get("")
    async def find_all(store: DocumentStore = Depends(get_store)) -> List[Dict[str, Any]]:
        return await store.find_all()

    # registered before "/{doc_id}" so "all" is not taken for an id
    @router.delete("/all")
    async def delete_all(store: DocumentStore = Depends(get_store)) -> Dict[str, Any]:
        count = await store.delete_all()
        return {
            "message": f"All {collection} deleted successfully",
            "deletedCount": count,
        }

    @router.get("/{doc_id}")
    async def find_one(doc_id: str, store: DocumentStore = Depends(get_store)) -> Dict[str, Any]:
        doc = await store.find_by_id(doc_id)
        if doc is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=not_found)
        return doc

    @router.put("/{doc_id}")
    async def update_one(
        doc_id: str,
        fields: Dict[str, Any] = Body(...),
        store: DocumentStore = Depends(get_store),
    ) -> Dict[str, Any]:
        doc = await store.update_by_id(doc_id, fields)
        if doc is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=not_found)
        return {"message": f"{label} updated", f"updated{label}": doc}

    @router.delete("/{doc_id}")
    async def delete_one(doc_id: str, store: DocumentStore = Depends(get_store)) -> Dict[str, Any]:
        if not await store.delete_by_id(doc_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=not_found)
        return {"message": f"{label} deleted"}

    return router
