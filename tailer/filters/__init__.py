"""
Line filtering for followed files.

- patterns: PatternGroup (AND), PatternFilter (OR of groups), parse_filter_query
"""
from .patterns import PatternGroup, PatternFilter, parse_filter_query

__all__ = [
    'PatternGroup',
    'PatternFilter',
    'parse_filter_query',
]
