"""
Ancestor resolver - calibrations reachable from one or two tip taxa

Pipeline (each stage waits for all of its branches):
1. tip names -> NCBI taxa            (concurrent)
2. taxa -> multitree nodes           (concurrent)
3. two taxa: add their MRCA node
4. nodes -> ancestor chains          (concurrent)
5. chains -> source tree nodes -> calibrations of those trees (concurrent)
6. union of everything found

A failed branch fails the whole search; results are matched to their
inputs by position, never by completion order.
"""
import asyncio
import logging
from typing import List, Sequence

from models.domain.taxonomy import AncestorEdge
from repositories.phylogeny_repository import PhylogenyRepository
from services.errors import InvalidCriteria, TaxonNotFound, MRCANotFound
from services.taxon_resolver import TaxonResolver
from utils.id_sets import unique_in_order

logger = logging.getLogger(__name__)

MAX_TIP_TAXA = 2


class AncestorResolver:
    """Tip-taxa search over the multitree."""

    def __init__(self, taxa: TaxonResolver, phylogeny: PhylogenyRepository):
        self.taxa = taxa
        self.phylogeny = phylogeny

    async def resolve_by_tip_taxa(self, names: Sequence[str]) -> List[int]:
        """
        Calibration IDs reachable from the ancestor paths of the tip taxa.

        With two taxa, the ancestors of their MRCA are searched as well.
        A calibration found on any path is included once.

        Raises:
            InvalidCriteria: not exactly one or two names
            TaxonNotFound: lists every name that failed to resolve
            MRCANotFound: the two taxa share no ancestor
            UpstreamError: a store lookup failed
        """
        names = list(names)
        if not 1 <= len(names) <= MAX_TIP_TAXA:
            raise InvalidCriteria("Must provide 1 or 2 tip taxa")

        # 1. Names -> taxa
        taxa = await asyncio.gather(*(self.taxa.resolve_taxon(name) for name in names))
        missing = [name for name, taxon in zip(names, taxa) if taxon is None]
        if missing:
            raise TaxonNotFound(missing)

        # 2. Taxa -> multitree nodes
        node_ids = await asyncio.gather(*(self.taxa.resolve_multitree_node(taxon) for taxon in taxa))
        missing = [name for name, node_id in zip(names, node_ids) if node_id is None]
        if missing:
            raise TaxonNotFound(missing, stage="node ids")

        # 3. Working node set
        working_nodes = list(node_ids)
        if len(working_nodes) == 2:
            mrca = await self.phylogeny.get_mrca(working_nodes[0], working_nodes[1])
            if mrca is None:
                raise MRCANotFound(names)
            logger.debug(f"MRCA of {names} is node {mrca.node_id}")
            working_nodes.append(mrca.node_id)

        # 4. Ancestor chains
        chains = await asyncio.gather(*(self.phylogeny.get_ancestors(node_id) for node_id in working_nodes))

        # 5. Chains -> calibrations
        per_chain = await asyncio.gather(*(self._calibrations_for_chain(chain) for chain in chains))

        # 6. Union
        ids = unique_in_order(i for chain_ids in per_chain for i in chain_ids)
        logger.debug(
            f"Tip taxa {names}: {len(working_nodes)} paths, "
            f"{[len(c) for c in chains]} ancestors, {len(ids)} calibrations"
        )
        return ids

    async def _calibrations_for_chain(self, chain: List[AncestorEdge]) -> List[int]:
        """Calibrations on the source trees behind one ancestor chain"""
        multitree_ids = unique_in_order(edge.node_id for edge in chain)
        source_node_ids = await self.phylogeny.find_source_node_ids(multitree_ids)
        return await self.phylogeny.find_calibration_ids_in_source_trees(source_node_ids)
