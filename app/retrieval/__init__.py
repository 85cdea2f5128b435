"""Query parsing, matching and scoring for demo-mode search."""

from app.retrieval.builders import RESULT_BUILDERS, EntityCollections
from app.retrieval.matcher import matches, passes_filters
from app.retrieval.query_parser import normalize, parse_query
from app.retrieval.scoring import calculate_demo_score, filename_boost

__all__ = [
    "EntityCollections",
    "RESULT_BUILDERS",
    "calculate_demo_score",
    "filename_boost",
    "matches",
    "normalize",
    "parse_query",
    "passes_filters",
]
