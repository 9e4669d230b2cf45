"""
Search criteria - tagged variants

A search carries at most one tree criterion and at most one age criterion.
Mutually exclusive request parameters are collapsed into these variants
once, when the request enters the search service, so nothing downstream
has to decide between e.g. `clade` and `tipTaxa`.
"""
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union


@dataclass(frozen=True)
class AgeRange:
    """Min/max age bounds in Ma. At least one must be set."""
    min_age: Optional[float] = None
    max_age: Optional[float] = None


@dataclass(frozen=True)
class GeologicalEra:
    """Comma-joined Period,Epoch,Age prefix, e.g. 'Neogene,Miocene'"""
    path: str


@dataclass(frozen=True)
class Clade:
    """Calibrations whose clade root is this taxon"""
    name: str


@dataclass(frozen=True)
class TipTaxa:
    """One or two tip taxa; two taxa also pull in their MRCA"""
    names: Tuple[str, ...]


AgeCriteria = Union[AgeRange, GeologicalEra]
TreeCriteria = Union[Clade, TipTaxa]


@dataclass(frozen=True)
class SearchCriteria:
    """
    Parsed search request.

    params keeps the raw request parameters so the response can echo
    back what was asked for.
    """
    tree: Optional[TreeCriteria] = None
    age: Optional[AgeCriteria] = None
    params: dict = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return self.tree is None and self.age is None
