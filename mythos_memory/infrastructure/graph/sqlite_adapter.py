"""SQLite implementation of the knowledge graph interface."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import aiosqlite
from pydantic import BaseModel, Field

from ...domain.models.claim import HistoricalClaim, ProvenanceData
from ...domain.ports.knowledge_graph import BackendUnavailableError, KnowledgeGraph

logger = logging.getLogger(__name__)

NARRATIVE_LABEL = "HistoricalNarrative"
SOURCE_LABEL = "Source"
CONTEXT_LABEL = "CulturalContext"

HAS_SOURCE = "HAS_SOURCE"
BELONGS_TO_CONTEXT = "BELONGS_TO_CONTEXT"
RELATES_TO = "RELATES_TO"

# Every stored narrative has exactly one HAS_SOURCE edge.
_CLAIM_SELECT = f"""
    SELECT n.key, n.properties, s.key, e.properties
    FROM nodes n
    JOIN edges e ON e.source_node = n.id AND e.rel_type = '{HAS_SOURCE}'
    JOIN nodes s ON s.id = e.target_node
"""


class GraphStoreConfig(BaseModel):
    """Configuration for the SQLite graph store."""

    db_path: str = Field(
        default="data/mythos_graph.db",
        description="Database file path, or ':memory:'"
    )
    timeout: float = Field(default=5.0, description="Lock wait timeout in seconds")


class SQLiteKnowledgeGraph(KnowledgeGraph):
    """Knowledge graph stored as labelled nodes and typed edges in SQLite.

    Schema:
    - nodes: (label, key) unique, JSON properties
    - edges: (rel_type, source, target, type_key) unique, JSON properties

    Narratives are keyed by claim_id, sources by description and contexts by
    tag name. ``RELATES_TO`` edges carry the caller's relationship type in
    ``type_key``.

    All statements run on one connection under one lock; a write is
    committed or rolled back before any other read or write starts.
    """

    def __init__(
        self,
        config: Optional[GraphStoreConfig] = None,
        backend_name: str = "SQLite",
    ):
        """Initialize the adapter.

        Args:
            config: Store configuration
            backend_name: Name of the backend
        """
        self._config = config or GraphStoreConfig()
        self._name = backend_name
        self._conn: Optional[aiosqlite.Connection] = None
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Open the database and create the schema."""
        db_path = self._config.db_path
        try:
            if db_path != ":memory:":
                Path(db_path).parent.mkdir(parents=True, exist_ok=True)
            self._conn = await aiosqlite.connect(db_path, timeout=self._config.timeout)
            await self._setup_schema()
        except (aiosqlite.Error, OSError) as e:
            self._conn = None
            raise BackendUnavailableError(f"Failed to open graph store {db_path}: {e}") from e
        logger.info(f"📚 Connected to graph store: {db_path}")

    async def shutdown(self) -> None:
        """Close the database connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None
            logger.info("Graph store connection closed")

    async def _setup_schema(self) -> None:
        """Create node and edge tables."""
        await self._conn.execute("""
            CREATE TABLE IF NOT EXISTS nodes (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                label TEXT NOT NULL,
                key TEXT NOT NULL,
                properties TEXT NOT NULL DEFAULT '{}',
                UNIQUE(label, key)
            )
        """)
        await self._conn.execute("""
            CREATE TABLE IF NOT EXISTS edges (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                rel_type TEXT NOT NULL,
                source_node INTEGER NOT NULL REFERENCES nodes(id),
                target_node INTEGER NOT NULL REFERENCES nodes(id),
                type_key TEXT NOT NULL DEFAULT '',
                properties TEXT NOT NULL DEFAULT '{}',
                UNIQUE(rel_type, source_node, target_node, type_key)
            )
        """)
        await self._conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_edges_source
            ON edges(source_node, rel_type)
        """)
        await self._conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_edges_target
            ON edges(target_node, rel_type)
        """)
        await self._conn.commit()

    def _connection(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise BackendUnavailableError("Graph store is not connected")
        return self._conn

    async def _merge_node(
        self,
        conn: aiosqlite.Connection,
        label: str,
        key: str,
        properties: Optional[Dict[str, Any]] = None,
    ) -> int:
        """Create a node or update its properties, returning its id."""
        await conn.execute(
            """
            INSERT INTO nodes (label, key, properties) VALUES (?, ?, ?)
            ON CONFLICT(label, key) DO UPDATE SET properties = excluded.properties
            """,
            (label, key, json.dumps(properties or {})),
        )
        return await self._node_id(conn, label, key)

    async def _node_id(self, conn: aiosqlite.Connection, label: str, key: str) -> Optional[int]:
        async with conn.execute(
            "SELECT id FROM nodes WHERE label = ? AND key = ?", (label, key)
        ) as cursor:
            row = await cursor.fetchone()
        return row[0] if row else None

    async def add_claim(self, claim: HistoricalClaim) -> str:
        """Upsert a claim keyed by claim_id.

        The narrative node keeps its identity across upserts; its source and
        context edges are replaced by the new claim's, RELATES_TO edges stay.
        """
        conn = self._connection()
        provenance = claim.provenance
        edge_properties = {
            "document_id": provenance.document_id,
            "author": provenance.author_id,
            "timestamp": provenance.timestamp,
        }
        if provenance.cryptographic_signature is not None:
            edge_properties["signature"] = provenance.cryptographic_signature

        async with self._lock:
            try:
                narrative_id = await self._merge_node(
                    conn,
                    NARRATIVE_LABEL,
                    claim.claim_id,
                    {
                        "content": claim.narrative_content,
                        "context_tags": claim.cultural_context_tags,
                    },
                )
                await conn.execute(
                    "DELETE FROM edges WHERE source_node = ? AND rel_type IN (?, ?)",
                    (narrative_id, HAS_SOURCE, BELONGS_TO_CONTEXT),
                )

                source_id = await self._merge_node(conn, SOURCE_LABEL, claim.source_description)
                await conn.execute(
                    "INSERT INTO edges (rel_type, source_node, target_node, properties) VALUES (?, ?, ?, ?)",
                    (HAS_SOURCE, narrative_id, source_id, json.dumps(edge_properties)),
                )

                for tag in dict.fromkeys(claim.cultural_context_tags):
                    context_id = await self._merge_node(conn, CONTEXT_LABEL, tag)
                    await conn.execute(
                        "INSERT INTO edges (rel_type, source_node, target_node) VALUES (?, ?, ?)",
                        (BELONGS_TO_CONTEXT, narrative_id, context_id),
                    )
                await conn.commit()
            except aiosqlite.Error as e:
                await conn.rollback()
                raise BackendUnavailableError(f"Failed to store claim {claim.claim_id}: {e}") from e

        logger.debug(f"Stored claim {claim.claim_id} with {len(claim.cultural_context_tags)} tags")
        return claim.claim_id

    async def get_claim(self, claim_id: str) -> Optional[HistoricalClaim]:
        """Get a claim by id."""
        claims = await self._fetch_claims(
            _CLAIM_SELECT + "WHERE n.label = ? AND n.key = ?",
            (NARRATIVE_LABEL, claim_id),
        )
        return claims[0] if claims else None

    async def relate_claims(
        self,
        source_claim_id: str,
        target_claim_id: str,
        relationship_type: str,
    ) -> bool:
        """Merge a typed RELATES_TO edge between two stored narratives.

        Returns:
            False if either claim is unknown, True otherwise
        """
        conn = self._connection()
        async with self._lock:
            try:
                source_id = await self._node_id(conn, NARRATIVE_LABEL, source_claim_id)
                target_id = await self._node_id(conn, NARRATIVE_LABEL, target_claim_id)
                if source_id is None or target_id is None:
                    return False
                await conn.execute(
                    """
                    INSERT OR IGNORE INTO edges (rel_type, source_node, target_node, type_key)
                    VALUES (?, ?, ?, ?)
                    """,
                    (RELATES_TO, source_id, target_id, relationship_type),
                )
                await conn.commit()
            except aiosqlite.Error as e:
                await conn.rollback()
                raise BackendUnavailableError(f"Failed to relate claims: {e}") from e
        return True

    async def get_related(
        self,
        claim_id: str,
        relationship_type: str,
    ) -> List[HistoricalClaim]:
        """Get claims that claim_id relates to with the given type."""
        return await self._fetch_claims(
            _CLAIM_SELECT + f"""
            WHERE n.id IN (
                SELECT r.target_node FROM edges r
                JOIN nodes src ON src.id = r.source_node
                WHERE src.label = ? AND src.key = ?
                  AND r.rel_type = '{RELATES_TO}' AND r.type_key = ?
            )
            ORDER BY n.id
            """,
            (NARRATIVE_LABEL, claim_id, relationship_type),
        )

    async def get_by_context_tag(self, context_tag: str) -> List[HistoricalClaim]:
        """Get claims belonging to a cultural context."""
        return await self._fetch_claims(
            _CLAIM_SELECT + f"""
            WHERE n.id IN (
                SELECT b.source_node FROM edges b
                JOIN nodes c ON c.id = b.target_node
                WHERE c.label = ? AND c.key = ? AND b.rel_type = '{BELONGS_TO_CONTEXT}'
            )
            ORDER BY n.id
            """,
            (CONTEXT_LABEL, context_tag),
        )

    async def get_by_source(self, source_description: str) -> List[HistoricalClaim]:
        """Get claims attributed to a source."""
        return await self._fetch_claims(
            _CLAIM_SELECT + "WHERE s.label = ? AND s.key = ? ORDER BY n.id",
            (SOURCE_LABEL, source_description),
        )

    async def _fetch_claims(self, query: str, params: Tuple[Any, ...]) -> List[HistoricalClaim]:
        conn = self._connection()
        # Reads share the connection with writes, so they must not observe
        # an upsert before it commits.
        async with self._lock:
            try:
                async with conn.execute(query, params) as cursor:
                    rows = await cursor.fetchall()
            except aiosqlite.Error as e:
                raise BackendUnavailableError(f"Graph query failed: {e}") from e
        return [self._row_to_claim(row) for row in rows]

    @staticmethod
    def _row_to_claim(row: Tuple[str, str, str, str]) -> HistoricalClaim:
        claim_id, narrative_json, source_description, provenance_json = row
        narrative = json.loads(narrative_json)
        provenance = json.loads(provenance_json)
        return HistoricalClaim(
            claim_id=claim_id,
            narrative_content=narrative["content"],
            source_description=source_description,
            cultural_context_tags=narrative.get("context_tags", []),
            provenance=ProvenanceData(
                document_id=provenance["document_id"],
                author_id=provenance["author"],
                timestamp=provenance["timestamp"],
                cryptographic_signature=provenance.get("signature"),
            ),
        )

    @property
    def backend_name(self) -> str:
        """Get the backend name."""
        return self._name

    @property
    def is_available(self) -> bool:
        """Check if the store is connected."""
        return self._conn is not None
