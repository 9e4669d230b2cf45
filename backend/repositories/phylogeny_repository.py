"""
Phylogeny Repository - taxonomy names and the multitree index

Storage: PostgreSQL
- ncbi_names: NCBI taxonomy names (name / uniquename -> taxonid)
- get_multitree_node_id(source, taxonid): taxon -> multitree node
- get_most_recent_common_ancestor(a, b, tree_filter): MRCA rows
- get_all_ancestors(node, tree_filter): ancestor chain rows
- calibrations_by_ncbi_clade: precomputed clade root -> calibration
- node_identity: multitree node <-> source tree node
- fcd_nodes / fcd_trees: source tree nodes and their calibrations

The multitree procedures are precomputed-graph operations owned by the
database; this repository only calls them and shapes their rows.
"""
import logging
from typing import Optional, List, Sequence

from models.domain.taxonomy import TaxonIdentifier, AncestorEdge, NCBI_SOURCE
from repositories.base import PostgresRepository

logger = logging.getLogger(__name__)

# Tree filter understood by the multitree procedures
ALL_TREES = 'ALL TREES'


class PhylogenyRepository(PostgresRepository):
    """Read-only access to taxonomy names and multitree graph procedures."""

    # =========================================================================
    # TAXON RESOLUTION
    # =========================================================================

    async def find_taxon(self, name: str) -> Optional[TaxonIdentifier]:
        """
        First NCBI taxon whose name or unique name matches.

        Matching is a case-insensitive LIKE, so SQL wildcards in the
        name are honored. No ranking: the first row wins.
        """
        row = await self._fetchrow("Taxon name lookup", """
            SELECT taxonid
            FROM ncbi_names
            WHERE name ILIKE $1 OR uniquename ILIKE $1
            LIMIT 1
        """, name)

        if not row:
            return None

        return TaxonIdentifier(source=NCBI_SOURCE, taxon_id=row['taxonid'])

    async def get_multitree_node_id(self, taxon: TaxonIdentifier) -> Optional[int]:
        """
        Multitree node for a taxon.

        The store function answers -1 when the taxon has no node.
        """
        node_id = await self._fetchval(
            "Multitree node lookup",
            "SELECT get_multitree_node_id($1, $2) AS node_id",
            taxon.source, taxon.taxon_id
        )

        if node_id is None or node_id < 0:
            return None
        return node_id

    # =========================================================================
    # MULTITREE GRAPH
    # =========================================================================

    async def get_mrca(self, node_a: int, node_b: int) -> Optional[AncestorEdge]:
        """Most recent common ancestor of two multitree nodes across all trees"""
        row = await self._fetchrow("MRCA computation", """
            SELECT node_id, parent_node_id, depth
            FROM get_most_recent_common_ancestor($1, $2, $3)
            LIMIT 1
        """, node_a, node_b, ALL_TREES)

        if not row:
            return None

        return AncestorEdge(
            node_id=row['node_id'],
            parent_node_id=row['parent_node_id'],
            depth=row['depth'],
        )

    async def get_ancestors(self, node_id: int) -> List[AncestorEdge]:
        """Full ancestor chain of a multitree node across all trees"""
        rows = await self._fetch("Ancestor computation", """
            SELECT node_id, parent_node_id, depth
            FROM get_all_ancestors($1, $2)
            ORDER BY depth
        """, node_id, ALL_TREES)

        return [
            AncestorEdge(
                node_id=row['node_id'],
                parent_node_id=row['parent_node_id'],
                depth=row['depth'],
            )
            for row in rows
        ]

    # =========================================================================
    # CALIBRATION ASSOCIATIONS
    # =========================================================================

    async def find_calibration_ids_in_clade(self, multitree_node_id: int) -> List[int]:
        """Calibrations whose recorded clade root is exactly this node"""
        rows = await self._fetch("Clade calibration lookup", """
            SELECT DISTINCT calibration_id
            FROM calibrations_by_ncbi_clade
            WHERE clade_root_multitree_id = $1
            ORDER BY calibration_id
        """, multitree_node_id)
        return [row['calibration_id'] for row in rows]

    async def find_source_node_ids(self, multitree_node_ids: Sequence[int]) -> List[int]:
        """
        Source tree nodes behind a set of multitree nodes.

        Pinned nodes and nodes from the NCBI taxonomy itself are skipped:
        only curated source trees carry calibrations.
        """
        if not multitree_node_ids:
            return []

        rows = await self._fetch("Source node lookup", """
            SELECT source_node_id
            FROM node_identity
            WHERE source_tree != $1
              AND is_pinned_node = 0
              AND multitree_node_id = ANY($2::int[])
        """, NCBI_SOURCE, list(multitree_node_ids))
        return [row['source_node_id'] for row in rows]

    async def find_calibration_ids_in_source_trees(self, source_node_ids: Sequence[int]) -> List[int]:
        """Calibrations attached to the source trees containing these nodes"""
        if not source_node_ids:
            return []

        rows = await self._fetch("Source tree calibration lookup", """
            SELECT t.calibration_id
            FROM fcd_trees t
            WHERE t.tree_id IN (
                SELECT n.tree_id FROM fcd_nodes n
                WHERE n.node_id = ANY($1::int[])
            )
        """, list(source_node_ids))
        return [row['calibration_id'] for row in rows if row['calibration_id'] is not None]
