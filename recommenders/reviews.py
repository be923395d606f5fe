"""
AI summaries of TMDB user reviews.
"""

import logging
from typing import Dict

from utils.tmdb import TMDBClient

logger = logging.getLogger('film_roulette')

MAX_REVIEWS = 10
SENTIMENTS = ('positive', 'negative', 'mixed', 'neutral')

REVIEW_SCHEMA = {
    'type': 'object',
    'properties': {
        'summary': {
            'type': 'string',
            'description': 'Overall summary of the reviews in 2-3 sentences',
        },
        'sentiment': {
            'type': 'string',
            'enum': list(SENTIMENTS),
            'description': 'Overall sentiment of the reviews',
        },
        'keyPoints': {
            'type': 'array',
            'items': {'type': 'string'},
            'description': '3-5 main points raised in the reviews',
        },
    },
    'required': ['summary', 'sentiment', 'keyPoints'],
}

SYSTEM_PROMPT = ("You are an expert in analysing movie reviews. Analyse the reviews "
                 "provided and write a concise, informative summary.")

NO_REVIEWS = {
    'summary': "No reviews available for this movie.",
    'sentiment': 'neutral',
    'keyPoints': ["Not enough reviews for analysis"],
}
FALLBACK_TEXT = "Analysis not available"


class ReviewAnalysisError(Exception):
    """Raised when the AI service returns no review analysis at all."""
    pass


class ReviewSummarizer:
    """Summarizes a movie's reviews with the AI service."""

    def __init__(self, tmdb: TMDBClient, ai):
        self.tmdb = tmdb
        self.ai = ai

    def summarize(self, movie_id: int) -> Dict:
        """
        Summarize the first reviews of a movie.

        Args:
            movie_id: TMDB movie ID

        Returns:
            {'summary', 'sentiment', 'keyPoints'}

        Raises:
            TMDBAPIError: If the reviews cannot be fetched
            AIServiceError: If the AI request fails
            ReviewAnalysisError: If the AI reply has no object
        """
        reviews = self.tmdb.movie_reviews(movie_id)[:MAX_REVIEWS]
        if not reviews:
            return {**NO_REVIEWS, 'keyPoints': list(NO_REVIEWS['keyPoints'])}

        reviews_text = "\n\n".join(
            f"{r.get('author', 'Anonymous')}: {r.get('content', '')}" for r in reviews
        )
        result = self.ai.generate_object(
            [
                {'role': 'system', 'content': SYSTEM_PROMPT},
                {'role': 'user', 'content': f"Analyse the following reviews of the movie:\n\n{reviews_text}"},
            ],
            REVIEW_SCHEMA,
            name='review_summary',
        )
        analysis = (result or {}).get('object')
        if not analysis:
            raise ReviewAnalysisError("Failed to generate the review analysis")

        key_points = analysis.get('keyPoints')
        sentiment = str(analysis.get('sentiment') or 'neutral')
        if sentiment not in SENTIMENTS:
            logger.debug(f"Unexpected sentiment '{sentiment}', using neutral")
            sentiment = 'neutral'
        return {
            'summary': str(analysis.get('summary') or FALLBACK_TEXT),
            'sentiment': sentiment,
            'keyPoints': ([str(p) for p in key_points] if isinstance(key_points, list)
                          else [FALLBACK_TEXT]),
        }
