"""
Utility functions
"""
from .id_sets import IdentifierSet, merge_ids, unique_in_order

__all__ = ['IdentifierSet', 'merge_ids', 'unique_in_order']
