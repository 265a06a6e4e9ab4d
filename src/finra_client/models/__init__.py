"""Typed models for FINRA datasets.

This module provides the consolidated short interest record model, its field
selector, and the query type used to page through the dataset.
"""

from .query import MAX_RESULTS_PER_PAGE, ConsolidatedShortInterestQuery, DateRange
from .short_interest import ConsolidatedShortInterest, ConsolidatedShortInterestField

__all__ = [
    "MAX_RESULTS_PER_PAGE",
    "ConsolidatedShortInterest",
    "ConsolidatedShortInterestField",
    "ConsolidatedShortInterestQuery",
    "DateRange",
]
