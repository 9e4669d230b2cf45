"""
Taxonomy and multitree domain models

The multitree is a unified node-ID space spanning every source tree plus
the NCBI taxonomy, which is what makes cross-tree ancestor and MRCA
computation possible. Node IDs are plain ints; these types only exist
for the values that carry more than an ID.
"""
from dataclasses import dataclass


# Source name used for taxa resolved from the NCBI names table
NCBI_SOURCE = "NCBI"


@dataclass(frozen=True)
class TaxonIdentifier:
    """Taxon ID scoped to a taxonomy authority, e.g. ('NCBI', 9606)"""
    source: str
    taxon_id: int


@dataclass(frozen=True)
class AncestorEdge:
    """
    One row of an ancestor chain.

    depth is negative and increases toward the root, as produced by the
    store's ancestor procedures.
    """
    node_id: int
    parent_node_id: int
    depth: int
