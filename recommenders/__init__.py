"""
Film Roulette - recommendation, history, suggestion and analysis engines.
"""

from .analysis import WatchAnalysisError, WatchAnalyzer
from .history import InvalidRatingError, RecommendationLog, WatchHistory
from .results import Recommendation, SoftResult, soft_call
from .reviews import ReviewAnalysisError, ReviewSummarizer
from .selector import InvalidGenreSelectionError, MovieSelector, NoMoviesFoundError
from .suggestions import GenreSuggester

__all__ = [
    'GenreSuggester',
    'InvalidGenreSelectionError',
    'InvalidRatingError',
    'MovieSelector',
    'NoMoviesFoundError',
    'Recommendation',
    'RecommendationLog',
    'ReviewAnalysisError',
    'ReviewSummarizer',
    'SoftResult',
    'WatchAnalysisError',
    'WatchAnalyzer',
    'WatchHistory',
    'soft_call',
]
