# docqa_client/models.py
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

DEFAULT_COLLECTION = "default"


class ChatRequest(BaseModel):
    """A question asked against one or more knowledge bases."""
    message: str = Field(min_length=1)
    knowledge_base_id: str | None = None
    knowledge_base_ids: list[str] | None = None

    def collection(self, default: str = DEFAULT_COLLECTION) -> str:
        """
        Collection the question is routed to: the explicit id, else the first
        of the selected ids, else the default collection.
        """
        if self.knowledge_base_id:
            return self.knowledge_base_id
        if self.knowledge_base_ids and self.knowledge_base_ids[0]:
            return self.knowledge_base_ids[0]
        return default

    def to_payload(self, default_collection: str = DEFAULT_COLLECTION) -> dict[str, Any]:
        """Wire body of the stream request."""
        return {
            "collection": self.collection(default_collection),
            "collectionIds": self.knowledge_base_ids,
            "question": self.message,
        }
