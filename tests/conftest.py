"""Test configuration and common fixtures."""

from typing import Dict, List, Optional, Set, Tuple

import pytest
import pytest_asyncio

from mythos_memory.domain.models.claim import HistoricalClaim, ProvenanceData
from mythos_memory.domain.ports.knowledge_graph import KnowledgeGraph
from mythos_memory.domain.services.claim_integrity_service import ClaimIntegrityService
from mythos_memory.domain.services.integrity_guard import BasicIntegrityGuard
from mythos_memory.infrastructure.graph.sqlite_adapter import GraphStoreConfig, SQLiteKnowledgeGraph


class FakeKnowledgeGraph(KnowledgeGraph):
    """In-process knowledge graph for tests, no database required."""

    def __init__(self, backend_name: str = "Fake"):
        """Initialize fake graph."""
        self._name = backend_name
        self._initialized = False
        self._claims: Dict[str, HistoricalClaim] = {}
        self._relations: List[Tuple[str, str, str]] = []

    async def initialize(self) -> None:
        """Initialize the graph."""
        self._initialized = True

    async def shutdown(self) -> None:
        """Shutdown the graph."""
        self._initialized = False

    async def add_claim(self, claim: HistoricalClaim) -> str:
        """Upsert a claim."""
        self._claims[claim.claim_id] = claim
        return claim.claim_id

    async def get_claim(self, claim_id: str) -> Optional[HistoricalClaim]:
        """Get a claim."""
        return self._claims.get(claim_id)

    async def relate_claims(self, source_claim_id: str, target_claim_id: str, relationship_type: str) -> bool:
        """Relate two claims."""
        if source_claim_id not in self._claims or target_claim_id not in self._claims:
            return False
        relation = (source_claim_id, target_claim_id, relationship_type)
        if relation not in self._relations:
            self._relations.append(relation)
        return True

    async def get_related(self, claim_id: str, relationship_type: str) -> List[HistoricalClaim]:
        """Get related claims."""
        targets: Set[str] = {
            target for source, target, kind in self._relations
            if source == claim_id and kind == relationship_type
        }
        return [claim for cid, claim in self._claims.items() if cid in targets]

    async def get_by_context_tag(self, context_tag: str) -> List[HistoricalClaim]:
        """Get claims by tag."""
        return [c for c in self._claims.values() if context_tag in c.cultural_context_tags]

    async def get_by_source(self, source_description: str) -> List[HistoricalClaim]:
        """Get claims by source."""
        return [c for c in self._claims.values() if c.source_description == source_description]

    @property
    def backend_name(self) -> str:
        """Get backend name."""
        return self._name

    @property
    def is_available(self) -> bool:
        """Check if available."""
        return self._initialized


def make_claim(
    claim_id: str = "test_claim_001",
    narrative_content: str = "A test narrative.",
    source_description: str = "Test source.",
    cultural_context_tags: Optional[List[str]] = None,
    signature: Optional[str] = None,
    timestamp: int = 1678886400,
) -> HistoricalClaim:
    """Build a claim with sensible test defaults."""
    return HistoricalClaim(
        claim_id=claim_id,
        narrative_content=narrative_content,
        source_description=source_description,
        cultural_context_tags=["test"] if cultural_context_tags is None else cultural_context_tags,
        provenance=ProvenanceData(
            document_id=f"doc_{claim_id}",
            author_id="author_001",
            timestamp=timestamp,
            cryptographic_signature=signature,
        ),
    )


@pytest.fixture
def guard() -> BasicIntegrityGuard:
    """Provide an integrity guard."""
    return BasicIntegrityGuard()


@pytest_asyncio.fixture
async def fake_graph() -> FakeKnowledgeGraph:
    """Provide an initialized fake knowledge graph."""
    graph = FakeKnowledgeGraph()
    await graph.initialize()
    yield graph
    await graph.shutdown()


@pytest_asyncio.fixture
async def sqlite_graph(tmp_path) -> SQLiteKnowledgeGraph:
    """Provide a SQLite knowledge graph in a temporary directory."""
    graph = SQLiteKnowledgeGraph(GraphStoreConfig(db_path=str(tmp_path / "graph" / "mythos.db")))
    await graph.initialize()
    yield graph
    await graph.shutdown()


@pytest.fixture
def claim_service(guard: BasicIntegrityGuard, fake_graph: FakeKnowledgeGraph) -> ClaimIntegrityService:
    """Provide a claim service over the fake graph."""
    return ClaimIntegrityService(guard, fake_graph)


@pytest.fixture
def claim_factory():
    """Provide the claim builder."""
    return make_claim
