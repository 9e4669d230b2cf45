"""
Calibration Search Service
==========================

Entry point for calibration lookups and searches.

A search runs at most one tree filter (clade or tip taxa) and at most one
age filter (min/max age or geological time). The filters are independent
and run concurrently; their ID lists are intersected, deduplicated and
hydrated into calibrations.

Mutually exclusive parameters resolve first-listed-wins:
- clade over tipTaxa
- geologicalTime over minAge/maxAge

Usage:
    service = CalibrationSearchService.from_pool(db_pool)
    result = await service.search({'clade': 'Primates', 'minAge': 10})
    calibration = await service.find_by_id(42)
"""
import asyncio
import logging
import math
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

import asyncpg

from config import Settings, get_settings
from models.domain.calibration import Calibration
from models.domain.criteria import (
    AgeRange, GeologicalEra, Clade, TipTaxa,
    AgeCriteria, TreeCriteria, SearchCriteria,
)
from repositories.calibration_repository import CalibrationRepository
from repositories.phylogeny_repository import PhylogenyRepository
from services.age_filter import AgeFilterResolver
from services.ancestor_resolver import AncestorResolver
from services.calibration_assembler import CalibrationAssembler
from services.clade_resolver import CladeResolver
from services.errors import InvalidCriteria, NotFound
from services.taxon_resolver import TaxonResolver
from utils.id_sets import IdentifierSet, merge_ids, unique_in_order

logger = logging.getLogger(__name__)


# =============================================================================
# Criteria parsing
# =============================================================================

def _parse_age(params: Mapping[str, Any], key: str) -> Optional[float]:
    value = params.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        raise InvalidCriteria(f"{key} must be a number, got {value!r}")
    if not math.isfinite(parsed):
        raise InvalidCriteria(f"{key} must be a finite number, got {value!r}")
    return parsed


def _parse_tip_taxa(value: Any) -> TipTaxa:
    """Accept ['Homo', 'Pan'], 'Homo,Pan' or a mix of both"""
    values = [value] if isinstance(value, str) else (value or [])
    names = tuple(n.strip() for v in values if v for n in str(v).split(',') if n.strip())
    return TipTaxa(names=names)


def parse_criteria(params: Mapping[str, Any]) -> SearchCriteria:
    """
    Collapse raw request parameters into tagged criteria.

    Presence of a key selects the variant even if its value is unusable;
    the resolver then rejects it, so `?minAge=` fails instead of silently
    searching everything.
    """
    tree: Optional[TreeCriteria] = None
    if 'clade' in params:
        name = (params.get('clade') or '').strip()
        if not name:
            raise InvalidCriteria("clade must not be empty")
        tree = Clade(name=name)
    elif 'tipTaxa' in params:
        tree = _parse_tip_taxa(params.get('tipTaxa'))

    age: Optional[AgeCriteria] = None
    if 'geologicalTime' in params:
        age = GeologicalEra(path=(params.get('geologicalTime') or '').strip())
    elif 'minAge' in params or 'maxAge' in params:
        age = AgeRange(min_age=_parse_age(params, 'minAge'), max_age=_parse_age(params, 'maxAge'))

    return SearchCriteria(tree=tree, age=age, params=dict(params))


# =============================================================================
# Search
# =============================================================================

@dataclass
class SearchResult:
    """Calibrations matching a search, with the parameters that produced them"""
    criteria: SearchCriteria
    calibrations: List[Calibration] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "query": self.criteria.params,
            "calibrations": [c.to_dict() for c in self.calibrations],
        }


class CalibrationSearchService:
    """
    Composes the resolvers behind find_by_id() and search().

    The resolvers are exposed as attributes so they can be used (and
    tested) on their own.
    """

    def __init__(
        self,
        calibrations: CalibrationRepository,
        phylogeny: PhylogenyRepository,
        published_status: int = 4,
    ):
        self.taxa = TaxonResolver(phylogeny)
        self.ages = AgeFilterResolver(calibrations)
        self.clades = CladeResolver(self.taxa, phylogeny)
        self.ancestors = AncestorResolver(self.taxa, phylogeny)
        self.assembler = CalibrationAssembler(calibrations, published_status=published_status)

    @classmethod
    def from_pool(cls, db_pool: asyncpg.Pool, settings: Optional[Settings] = None) -> 'CalibrationSearchService':
        """Build the service over a shared asyncpg pool"""
        settings = settings or get_settings()
        return cls(
            calibrations=CalibrationRepository(db_pool, image_url_root=settings.image_url_root),
            phylogeny=PhylogenyRepository(db_pool),
            published_status=settings.published_status,
        )

    async def find_by_id(self, calibration_id: int) -> Calibration:
        """
        Single published calibration.

        Raises:
            NotFound: no published calibration with this ID
        """
        calibration = await self.assembler.assemble_one(calibration_id)
        if calibration is None:
            raise NotFound(f"calibration with id: {calibration_id} not found")
        return calibration

    async def search(self, params) -> SearchResult:
        """
        Search calibrations.

        Args:
            params: raw parameter mapping or already-parsed SearchCriteria

        Raises:
            InvalidCriteria: no criteria at all, or malformed criteria
            TaxonNotFound / MRCANotFound: tree criteria did not resolve
            UpstreamError: a store lookup failed
        """
        criteria = params if isinstance(params, SearchCriteria) else parse_criteria(params)
        if criteria.is_empty:
            raise InvalidCriteria("Please provide a tree (clade, tipTaxa) or age (minAge, maxAge, geologicalTime) filter")

        lookups = []
        if criteria.tree is not None:
            lookups.append(self._resolve_tree(criteria.tree))
        if criteria.age is not None:
            lookups.append(self._resolve_age(criteria.age))

        # Tree results merge first, then age; any failure aborts the search
        filtered: IdentifierSet = None
        for ids in await asyncio.gather(*lookups):
            filtered = merge_ids(filtered, ids)

        calibration_ids = unique_in_order(filtered)
        assembled = await self.assembler.assemble(calibration_ids)
        calibrations = [c for c in assembled if c is not None]

        logger.info(
            f"🔎 Search {criteria.params}: {len(calibration_ids)} ids, "
            f"{len(calibrations)} published calibrations"
        )
        return SearchResult(criteria=criteria, calibrations=calibrations)

    async def _resolve_tree(self, tree: TreeCriteria) -> List[int]:
        if isinstance(tree, Clade):
            return await self.clades.resolve_clade(tree.name)
        return await self.ancestors.resolve_by_tip_taxa(tree.names)

    async def _resolve_age(self, age: AgeCriteria) -> List[int]:
        if isinstance(age, GeologicalEra):
            return await self.ages.resolve_by_era(age.path)
        return await self.ages.resolve_by_age_range(min_age=age.min_age, max_age=age.max_age)
