"""
Clade resolver - calibrations rooted at a named clade
"""
import logging
from typing import List

from repositories.phylogeny_repository import PhylogenyRepository
from services.errors import TaxonNotFound
from services.taxon_resolver import TaxonResolver

logger = logging.getLogger(__name__)


class CladeResolver:
    """
    name -> taxon -> multitree node -> calibrations with that clade root.

    The clade association table is precomputed over descendants, so an
    exact match on the root node is the whole clade.
    """

    def __init__(self, taxa: TaxonResolver, phylogeny: PhylogenyRepository):
        self.taxa = taxa
        self.phylogeny = phylogeny

    async def resolve_clade(self, name: str) -> List[int]:
        """
        Calibration IDs for a clade.

        Raises:
            TaxonNotFound: the name has no taxon or the taxon has no node
            UpstreamError: a store lookup failed
        """
        taxon = await self.taxa.resolve_taxon(name)
        if taxon is None:
            raise TaxonNotFound([name])

        node_id = await self.taxa.resolve_multitree_node(taxon)
        if node_id is None:
            raise TaxonNotFound([name], stage="node ids")

        ids = await self.phylogeny.find_calibration_ids_in_clade(node_id)
        logger.debug(f"Clade '{name}' (node {node_id}) has {len(ids)} calibrations")
        return ids
