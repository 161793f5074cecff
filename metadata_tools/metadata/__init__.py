"""
Header heuristics (author zone, author names, dates, document type) and fusion.
"""

from .author_zone import AuthorZoneLocator
from .author_extractor import AuthorNameExtractor
from .date_ranker import DateCandidateRanker
from .fusion import FusionEngine
from .heuristic_parser import HeuristicPaperParser

__all__ = [
    'AuthorZoneLocator', 'AuthorNameExtractor', 'DateCandidateRanker',
    'FusionEngine', 'HeuristicPaperParser',
]
