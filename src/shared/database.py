"""
MongoDB component and profile store using Motor (async driver).

Every query is filtered by owner_id; no method ever returns another owner's
components.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from loguru import logger
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, IndexModel

from .config import Settings, get_settings
from .errors import NotFoundError, require_owner_id
from .models import Component, EmbeddingStats, Profile, ScoredComponent


class Database:
    """Async MongoDB database wrapper."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._client: Optional[AsyncIOMotorClient] = None
        self._db: Optional[AsyncIOMotorDatabase] = None

    async def connect(self) -> None:
        """Establish database connection."""
        if self._client is not None:
            return

        logger.info(f"Connecting to MongoDB: {self.settings.mongodb_database}")
        self._client = AsyncIOMotorClient(self.settings.mongodb_uri)
        self._db = self._client[self.settings.mongodb_database]

        # Verify connection
        await self._client.admin.command("ping")
        logger.info("MongoDB connection established")

    async def disconnect(self) -> None:
        """Close database connection."""
        if self._client:
            self._client.close()
            self._client = None
            self._db = None
            logger.info("MongoDB connection closed")

    @property
    def db(self) -> AsyncIOMotorDatabase:
        """Get database instance."""
        if self._db is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._db

    # -------------------------------------------------------------------------
    # Components Collection
    # -------------------------------------------------------------------------

    async def insert_component(self, component: Component) -> str:
        """Insert a new component, returns component id."""
        require_owner_id(component.owner_id)
        await self.db.components.insert_one(component.to_document())
        return component.id

    async def insert_components(self, components: list[Component]) -> int:
        """Insert several components, returns how many were written."""
        if not components:
            return 0
        for component in components:
            require_owner_id(component.owner_id)
        result = await self.db.components.insert_many([c.to_document() for c in components])
        return len(result.inserted_ids)

    async def get_component(self, owner_id: str, component_id: str) -> Component:
        """Get one of the owner's components by id."""
        doc = await self.db.components.find_one(
            {"_id": component_id, "owner_id": require_owner_id(owner_id)}
        )
        if doc is None:
            raise NotFoundError(
                f"Component {component_id} not found",
                details={"component_id": component_id},
            )
        return Component.from_document(doc)

    async def get_user_components(
        self, owner_id: str, limit: Optional[int] = None
    ) -> list[Component]:
        """Get all of the owner's components, newest first."""
        cursor = self.db.components.find({"owner_id": require_owner_id(owner_id)}).sort(
            "created_at", DESCENDING
        )
        if limit:
            cursor = cursor.limit(limit)
        docs = await cursor.to_list(length=limit)
        return [Component.from_document(doc) for doc in docs]

    async def update_component(
        self, owner_id: str, component_id: str, changes: dict[str, Any]
    ) -> Component:
        """
        Apply field changes to a component.

        Changes to embedded text clear the stored embedding so it is recomputed
        by the next backfill.
        """
        current = await self.get_component(owner_id, component_id)
        updated = current.edit(**changes)
        await self.db.components.replace_one(
            {"_id": component_id, "owner_id": owner_id}, updated.to_document()
        )
        if current.has_embedding and not updated.has_embedding:
            logger.debug(f"Invalidated embedding for component {component_id}")
        return updated

    async def update_component_embedding(
        self, owner_id: str, component_id: str, embedding: list[float]
    ) -> None:
        """Store a freshly computed embedding."""
        result = await self.db.components.update_one(
            {"_id": component_id, "owner_id": require_owner_id(owner_id)},
            {"$set": {"embedding": embedding, "updated_at": datetime.now(timezone.utc)}},
        )
        if result.matched_count == 0:
            raise NotFoundError(
                f"Component {component_id} not found",
                details={"component_id": component_id},
            )

    async def delete_component(self, owner_id: str, component_id: str) -> bool:
        """Delete a component together with its embedding."""
        result = await self.db.components.delete_one(
            {"_id": component_id, "owner_id": require_owner_id(owner_id)}
        )
        return result.deleted_count > 0

    async def delete_owner_components(self, owner_id: str) -> int:
        """Cascade delete when an owner is removed."""
        result = await self.db.components.delete_many(
            {"owner_id": require_owner_id(owner_id)}
        )
        logger.info(f"Deleted {result.deleted_count} components for owner {owner_id}")
        return result.deleted_count

    async def get_components_without_embeddings(
        self, owner_id: str, limit: int = 100
    ) -> list[Component]:
        """Get components still waiting for an embedding."""
        cursor = (
            self.db.components.find(
                {"owner_id": require_owner_id(owner_id), "embedding": None}
            )
            .sort("created_at", DESCENDING)
            .limit(limit)
        )
        docs = await cursor.to_list(length=limit)
        logger.debug(f"Found {len(docs)} components without embeddings")
        return [Component.from_document(doc) for doc in docs]

    def similarity_pipeline(
        self, owner_id: str, query_vector: list[float], top_k: int
    ) -> list[dict[str, Any]]:
        """
        Aggregation pipeline for an owner-scoped $vectorSearch.

        For a cosine index Atlas reports vectorSearchScore = (1 + cos) / 2, so the
        score is mapped back to cosine similarity (2 * score - 1) before the
        similarity_match_threshold cutoff is applied.
        """
        return [
            {
                "$vectorSearch": {
                    "index": self.settings.mongodb_vector_index,
                    "path": "embedding",
                    "queryVector": query_vector,
                    "numCandidates": max(self.settings.vector_num_candidates, top_k),
                    "limit": top_k,
                    "filter": {"owner_id": require_owner_id(owner_id)},
                }
            },
            {
                "$addFields": {
                    "similarity": {
                        "$subtract": [{"$multiply": [2, {"$meta": "vectorSearchScore"}]}, 1]
                    }
                }
            },
            {"$match": {"similarity": {"$gt": self.settings.similarity_match_threshold}}},
        ]

    async def similarity_search(
        self, owner_id: str, query_vector: list[float], top_k: int
    ) -> list[ScoredComponent]:
        """
        Owner-scoped nearest neighbours above the similarity threshold.

        Returns an empty list when nothing matches.
        """
        pipeline = self.similarity_pipeline(owner_id, query_vector, top_k)
        docs = await self.db.components.aggregate(pipeline).to_list(length=top_k)
        return [
            ScoredComponent(
                component=Component.from_document(doc),
                similarity=float(doc.get("similarity", 0.0)),
            )
            for doc in docs
        ]

    async def get_embedding_stats(self, owner_id: str) -> EmbeddingStats:
        """Get embedding coverage for an owner."""
        owner_id = require_owner_id(owner_id)
        total = await self.db.components.count_documents({"owner_id": owner_id})
        with_embedding = await self.db.components.count_documents(
            {"owner_id": owner_id, "embedding": {"$ne": None}}
        )
        return EmbeddingStats(
            total=total,
            with_embedding=with_embedding,
            without_embedding=total - with_embedding,
            percentage=round(with_embedding / total * 100) if total else 0,
        )

    # -------------------------------------------------------------------------
    # Profiles Collection
    # -------------------------------------------------------------------------

    async def get_profile(self, owner_id: str) -> Optional[Profile]:
        """Get owner profile, None when the owner has not created one."""
        doc = await self.db.profiles.find_one({"_id": require_owner_id(owner_id)})
        if doc is None:
            return None
        return Profile.model_validate(doc)

    async def save_profile(self, owner_id: str, profile: Profile) -> None:
        """Create or replace the owner's profile."""
        owner_id = require_owner_id(owner_id)
        doc = profile.model_dump()
        doc["updated_at"] = datetime.now(timezone.utc)
        await self.db.profiles.replace_one({"_id": owner_id}, doc, upsert=True)

    # -------------------------------------------------------------------------
    # Index Setup
    # -------------------------------------------------------------------------

    async def ensure_indexes(self) -> None:
        """
        Create database indexes.

        The Atlas vector index (mongodb_vector_index) is managed in Atlas. It
        must use the cosine similarity function and declare owner_id as a filter
        field.
        """
        component_indexes = [
            IndexModel([("owner_id", ASCENDING), ("created_at", DESCENDING)]),
            IndexModel([("owner_id", ASCENDING), ("type", ASCENDING)]),
        ]
        await self.db.components.create_indexes(component_indexes)

        logger.info("Database indexes created")
