"""
Taxon resolver - taxon names to NCBI taxa to multitree nodes
"""
import logging
from typing import Optional

from models.domain.taxonomy import TaxonIdentifier
from repositories.phylogeny_repository import PhylogenyRepository

logger = logging.getLogger(__name__)


class TaxonResolver:
    """
    Two-step taxon resolution.

    Both steps return None when nothing matches; deciding whether that is
    an error belongs to the caller (clade vs. tip-taxa search report it
    differently).
    """

    def __init__(self, phylogeny: PhylogenyRepository):
        self.phylogeny = phylogeny

    async def resolve_taxon(self, name: str) -> Optional[TaxonIdentifier]:
        """First taxon matching the name or unique name, case-insensitively"""
        taxon = await self.phylogeny.find_taxon(name)
        if taxon is None:
            logger.warning(f"⚠️ No taxon found for '{name}'")
        else:
            logger.debug(f"Taxon '{name}' -> {taxon.source}:{taxon.taxon_id}")
        return taxon

    async def resolve_multitree_node(self, taxon: TaxonIdentifier) -> Optional[int]:
        """Multitree node ID for a resolved taxon"""
        node_id = await self.phylogeny.get_multitree_node_id(taxon)
        if node_id is None:
            logger.warning(f"⚠️ No multitree node for {taxon.source}:{taxon.taxon_id}")
        return node_id
