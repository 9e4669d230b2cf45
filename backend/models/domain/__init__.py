"""
Domain Models - Storage-agnostic data structures

These models represent the calibration search domain independent of the
storage layer. Services operate on these models, not raw database rows.

- Calibration, Fossil, Image: hydrated search results
- TaxonIdentifier, AncestorEdge: taxonomy / multitree lookups
- AgeRange, GeologicalEra, Clade, TipTaxa, SearchCriteria: parsed search input
"""

from .calibration import Calibration, Fossil, Image
from .taxonomy import TaxonIdentifier, AncestorEdge, NCBI_SOURCE
from .criteria import (
    AgeRange,
    GeologicalEra,
    Clade,
    TipTaxa,
    AgeCriteria,
    TreeCriteria,
    SearchCriteria,
)

__all__ = [
    # Search results
    'Calibration',
    'Fossil',
    'Image',

    # Taxonomy / multitree
    'TaxonIdentifier',
    'AncestorEdge',
    'NCBI_SOURCE',

    # Criteria
    'AgeRange',
    'GeologicalEra',
    'Clade',
    'TipTaxa',
    'AgeCriteria',
    'TreeCriteria',
    'SearchCriteria',
]
