from typing import Any, Dict, Optional
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ReturnDocument

class OwnerScopedCollection:
    """
    Wraps a motor collection so every query is pinned to a single owner.

    A record owned by someone else is indistinguishable from a missing one,
    which is what lets "not found" double as the authorization denial.
    """
    def __init__(self, collection: AsyncIOMotorCollection, owner_id: str, field_name: str = "recipient_id"):
        self._collection = collection
        self.owner_id = owner_id
        self.field_name = field_name

    def _merge_filter(self, filter: Optional[Dict] = None) -> Dict:
        """Merges caller filter with the owner filter."""
        if filter is None:
            filter = {}
        # Caller-supplied owner keys are overwritten, never trusted
        return {**filter, self.field_name: self.owner_id}

    async def find_one(self, filter: Optional[Dict] = None, *args, **kwargs) -> Optional[Dict]:
        return await self._collection.find_one(self._merge_filter(filter), *args, **kwargs)

    def find(self, filter: Optional[Dict] = None, *args, **kwargs):
        return self._collection.find(self._merge_filter(filter), *args, **kwargs)

    async def count_documents(self, filter: Optional[Dict] = None, *args, **kwargs) -> int:
        return await self._collection.count_documents(self._merge_filter(filter), *args, **kwargs)

    async def update_many(self, filter: Dict, update: Dict, *args, **kwargs):
        return await self._collection.update_many(self._merge_filter(filter), update, *args, **kwargs)

    async def find_one_and_update(self, filter: Dict, update: Dict, *args, **kwargs) -> Optional[Dict[str, Any]]:
        # Never upsert through a scoped handle: a deleted record must stay deleted
        kwargs.pop("upsert", None)
        kwargs.setdefault("return_document", ReturnDocument.AFTER)
        return await self._collection.find_one_and_update(self._merge_filter(filter), update, *args, **kwargs)

    async def find_one_and_delete(self, filter: Dict, *args, **kwargs) -> Optional[Dict[str, Any]]:
        return await self._collection.find_one_and_delete(self._merge_filter(filter), *args, **kwargs)
