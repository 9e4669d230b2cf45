"""
Pytest configuration and in-memory store fakes for the search engine tests.

FakeCalibrationRepository / FakePhylogenyRepository implement the same
async methods as the real repositories over plain dicts, and record every
call so tests can assert which lookups were (not) made.

FakePool stands in for asyncpg.Pool when a test needs to see the SQL.
"""
from contextlib import asynccontextmanager
from typing import Dict, List, Optional, Tuple

import pytest

from models.domain.calibration import Calibration, Fossil, Image
from models.domain.taxonomy import TaxonIdentifier, AncestorEdge, NCBI_SOURCE
from services.errors import UpstreamError
from services.search_service import CalibrationSearchService

IMAGE_ROOT = "https://fossilcalibrations.org/publication_image.php?id="


class CallLog:
    """Records (method, args) pairs"""

    def __init__(self):
        self.calls: List[Tuple[str, tuple]] = []

    def record(self, method: str, *args):
        self.calls.append((method, args))

    def count(self, method: str) -> int:
        return sum(1 for m, _ in self.calls if m == method)

    def args(self, method: str) -> List[tuple]:
        return [a for m, a in self.calls if m == method]


class FakeCalibrationRepository(CallLog):
    """Calibrations keyed by ID; status 4 = published"""

    def __init__(self):
        super().__init__()
        self.rows: Dict[int, Calibration] = {}
        self.status: Dict[int, int] = {}
        self.fossils: Dict[int, List[Fossil]] = {}
        self.publication_images: Dict[int, List[Image]] = {}
        self.tree_images: Dict[int, List[Image]] = {}
        self.age_ids: List[int] = []
        self.era_ids: List[int] = []
        self.fail_on: Optional[str] = None

    def add(self, calibration_id: int, status: int = 4, **fields) -> Calibration:
        calibration = Calibration(id=calibration_id, **fields)
        self.rows[calibration_id] = calibration
        self.status[calibration_id] = status
        return calibration

    def _maybe_fail(self, method: str):
        if self.fail_on == method:
            raise UpstreamError(f"{method} failed: connection reset")

    async def get_published(self, calibration_id, published_status):
        self.record('get_published', calibration_id, published_status)
        self._maybe_fail('get_published')
        if self.status.get(calibration_id) != published_status:
            return None
        return self.rows.get(calibration_id)

    async def get_fossils(self, calibration_id):
        self.record('get_fossils', calibration_id)
        self._maybe_fail('get_fossils')
        return list(self.fossils.get(calibration_id, []))

    async def get_publication_images(self, calibration_id):
        self.record('get_publication_images', calibration_id)
        self._maybe_fail('get_publication_images')
        return list(self.publication_images.get(calibration_id, []))

    async def get_tree_images(self, calibration_id):
        self.record('get_tree_images', calibration_id)
        self._maybe_fail('get_tree_images')
        return list(self.tree_images.get(-calibration_id, []))

    async def find_ids_by_age_range(self, min_age=None, max_age=None):
        self.record('find_ids_by_age_range', min_age, max_age)
        self._maybe_fail('find_ids_by_age_range')
        return list(self.age_ids)

    async def find_ids_by_geological_time(self, era_path):
        self.record('find_ids_by_geological_time', era_path)
        self._maybe_fail('find_ids_by_geological_time')
        return list(self.era_ids)


class FakePhylogenyRepository(CallLog):
    """
    Taxa, multitree nodes and ancestor chains.

    source_nodes maps multitree node -> source tree node IDs (already
    filtered of NCBI / pinned nodes); tree_calibrations maps source node
    -> calibrations of its tree.
    """

    def __init__(self):
        super().__init__()
        self.taxa: Dict[str, int] = {}
        self.nodes: Dict[int, int] = {}
        self.mrca: Dict[frozenset, int] = {}
        self.ancestors: Dict[int, List[int]] = {}
        self.clades: Dict[int, List[int]] = {}
        self.source_nodes: Dict[int, List[int]] = {}
        self.tree_calibrations: Dict[int, List[int]] = {}
        self.fail_on: Optional[str] = None

    def _maybe_fail(self, method: str):
        if self.fail_on == method:
            raise UpstreamError(f"{method} failed: timeout")

    async def find_taxon(self, name):
        self.record('find_taxon', name)
        self._maybe_fail('find_taxon')
        taxon_id = self.taxa.get(name.lower())
        return TaxonIdentifier(NCBI_SOURCE, taxon_id) if taxon_id is not None else None

    async def get_multitree_node_id(self, taxon):
        self.record('get_multitree_node_id', taxon)
        self._maybe_fail('get_multitree_node_id')
        return self.nodes.get(taxon.taxon_id)

    async def get_mrca(self, node_a, node_b):
        self.record('get_mrca', node_a, node_b)
        self._maybe_fail('get_mrca')
        node_id = self.mrca.get(frozenset((node_a, node_b)))
        return AncestorEdge(node_id, node_id - 1, -3) if node_id is not None else None

    async def get_ancestors(self, node_id):
        self.record('get_ancestors', node_id)
        self._maybe_fail('get_ancestors')
        chain = self.ancestors.get(node_id, [])
        return [AncestorEdge(n, n - 1, -depth) for depth, n in enumerate(chain)]

    async def find_calibration_ids_in_clade(self, multitree_node_id):
        self.record('find_calibration_ids_in_clade', multitree_node_id)
        self._maybe_fail('find_calibration_ids_in_clade')
        return list(self.clades.get(multitree_node_id, []))

    async def find_source_node_ids(self, multitree_node_ids):
        self.record('find_source_node_ids', tuple(multitree_node_ids))
        self._maybe_fail('find_source_node_ids')
        return [s for n in multitree_node_ids for s in self.source_nodes.get(n, [])]

    async def find_calibration_ids_in_source_trees(self, source_node_ids):
        self.record('find_calibration_ids_in_source_trees', tuple(source_node_ids))
        self._maybe_fail('find_calibration_ids_in_source_trees')
        return [c for s in source_node_ids for c in self.tree_calibrations.get(s, [])]


class FakeConnection:
    """Answers fetch/fetchrow/fetchval from queued results, recording SQL"""

    def __init__(self, pool: 'FakePool'):
        self.pool = pool

    async def _next(self, method, query, args):
        self.pool.queries.append((method, query, args))
        if self.pool.error is not None:
            raise self.pool.error
        return self.pool.results.pop(0) if self.pool.results else None

    async def fetch(self, query, *args):
        return await self._next('fetch', query, args) or []

    async def fetchrow(self, query, *args):
        return await self._next('fetchrow', query, args)

    async def fetchval(self, query, *args):
        return await self._next('fetchval', query, args)


class FakePool:
    """Minimal asyncpg.Pool stand-in: acquire() yields a FakeConnection"""

    def __init__(self, results=None, error: Optional[Exception] = None):
        self.results = list(results or [])
        self.error = error
        self.queries: List[Tuple[str, str, tuple]] = []

    @asynccontextmanager
    async def acquire(self):
        yield FakeConnection(self)


@pytest.fixture
def calibration_repo():
    return FakeCalibrationRepository()


@pytest.fixture
def phylogeny_repo():
    return FakePhylogenyRepository()


@pytest.fixture
def service(calibration_repo, phylogeny_repo):
    return CalibrationSearchService(calibration_repo, phylogeny_repo, published_status=4)


@pytest.fixture
def primates(phylogeny_repo):
    """
    Homo and Pan resolve; their MRCA is node 300.

    Ancestor chains:
        Homo (100): 100, 10, 1
        Pan  (200): 200, 20, 1
        MRCA (300): 300, 1
    Source nodes / tree calibrations:
        10 -> 1010 -> [11]      (Homo path only)
        20 -> 2020 -> [22]      (Pan path only)
        300 -> 3030 -> [33]     (MRCA path only)
        1 -> 1001 -> [7, 8]     (all paths)
    """
    repo = phylogeny_repo
    repo.taxa.update({'homo': 9605, 'pan': 9596, 'primates': 9443})
    repo.nodes.update({9605: 100, 9596: 200, 9443: 500})
    repo.mrca[frozenset((100, 200))] = 300
    repo.ancestors.update({
        100: [100, 10, 1],
        200: [200, 20, 1],
        300: [300, 1],
    })
    repo.source_nodes.update({10: [1010], 20: [2020], 300: [3030], 1: [1001]})
    repo.tree_calibrations.update({1010: [11], 2020: [22], 3030: [33], 1001: [7, 8]})
    repo.clades[500] = [7, 11, 22]
    return repo
