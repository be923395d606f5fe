"""
Viewing-habit analysis for Film Roulette.

Computes rating and genre statistics over the whole watch history and asks
the AI service for a narrative summary with recommendations. The numbers
are always returned; only the narrative falls back to fixed text.
"""

import logging
from typing import Dict, List

from utils.genres import parse_stored_genres
from utils.helpers import round_half_up
from utils.storage import MovieStore

logger = logging.getLogger('film_roulette')

TOP_GENRES_IN_PROMPT = 5

EMPTY_HISTORY_ANALYSIS = ("You haven't watched any movies yet. Start watching and rating "
                          "movies to get a personalized analysis of your viewing habits!")
EMPTY_HISTORY_RECOMMENDATIONS = [
    "Pick a few genres you like and ask for a recommendation",
    "Rate the movies you watch so future suggestions fit your taste",
]
FALLBACK_ANALYSIS = "A detailed analysis is not available right now."
FALLBACK_RECOMMENDATIONS = [
    "Keep exploring genres you haven't watched yet",
    "Rate more movies to improve your analysis",
]

ANALYSIS_SCHEMA = {
    'type': 'object',
    'properties': {
        'analysis': {
            'type': 'string',
            'description': 'Two or three paragraphs about the viewing habits',
        },
        'recommendations': {
            'type': 'array',
            'items': {'type': 'string'},
            'description': '3-5 concrete suggestions for what to watch next',
        },
    },
    'required': ['analysis', 'recommendations'],
}

SYSTEM_PROMPT = ("You are a film critic who analyses a person's viewing habits. Be friendly, "
                 "specific and base every observation on the data provided.")


class WatchAnalysisError(Exception):
    """Raised when the analysis cannot be produced."""
    pass


def empty_rating_stats() -> Dict:
    return {
        'averageRating': 0,
        'totalMovies': 0,
        'highlyRated': 0,
        'mediumRated': 0,
        'lowRated': 0,
    }


def compute_watch_stats(rows: List[Dict]) -> Dict:
    """
    Compute genre and rating statistics in one pass.

    Unrated movies (rating None or 0) count toward totals and genre
    counts but not toward any rating aggregate.

    Args:
        rows: Watched-movie rows

    Returns:
        {'genreStats': [...], 'ratingStats': {...}} with genres sorted by
        watch count, most watched first
    """
    genres: Dict[str, Dict] = {}
    total_rating = 0
    rated_count = 0
    buckets = {'highlyRated': 0, 'mediumRated': 0, 'lowRated': 0}

    for row in rows:
        rating = row.get('rating') or 0
        if rating > 0:
            total_rating += rating
            rated_count += 1
            if rating >= 4:
                buckets['highlyRated'] += 1
            elif rating == 3:
                buckets['mediumRated'] += 1
            else:
                buckets['lowRated'] += 1

        for name in parse_stored_genres(row.get('genres')):
            entry = genres.setdefault(name, {'count': 0, 'totalRating': 0, 'ratings': []})
            entry['count'] += 1
            if rating > 0:
                entry['totalRating'] += rating
                entry['ratings'].append(rating)

    total_movies = len(rows)
    genre_stats = [
        {
            'genre': name,
            'count': entry['count'],
            'averageRating': (round_half_up(entry['totalRating'] / len(entry['ratings']), 1)
                              if entry['ratings'] else 0),
            'percentage': round_half_up(entry['count'] / total_movies * 100) if total_movies else 0,
        }
        for name, entry in genres.items()
    ]
    genre_stats.sort(key=lambda s: s['count'], reverse=True)

    rating_stats = {
        'averageRating': round_half_up(total_rating / rated_count, 1) if rated_count else 0,
        'totalMovies': total_movies,
        **buckets,
    }
    return {'genreStats': genre_stats, 'ratingStats': rating_stats}


def build_analysis_prompt(rows: List[Dict], genre_stats: List[Dict], rating_stats: Dict) -> str:
    """Compose the user prompt describing the watch history."""
    lines = ["Analyse my movie viewing habits.", "", "Movies I watched:"]
    for row in rows:
        rating = row.get('rating')
        rating_text = f"{rating}/5" if rating else "not rated"
        lines.append(f"- {row['title']} ({rating_text})")

    lines += ["", "Top genres:"]
    for stat in genre_stats[:TOP_GENRES_IN_PROMPT]:
        lines.append(f"- {stat['genre']}: {stat['count']} movies ({stat['percentage']}%), "
                     f"average rating {stat['averageRating']}")

    lines += [
        "",
        "Ratings:",
        f"- Average rating: {rating_stats['averageRating']}",
        f"- Highly rated (4-5 stars): {rating_stats['highlyRated']}",
        f"- Medium (3 stars): {rating_stats['mediumRated']}",
        f"- Low (1-2 stars): {rating_stats['lowRated']}",
        f"- Total watched: {rating_stats['totalMovies']}",
        "",
        "Describe my taste and give me recommendations for what to watch next.",
    ]
    return "\n".join(lines)


class WatchAnalyzer:
    """Aggregates watch history and narrates it with the AI service."""

    def __init__(self, store: MovieStore, ai):
        """
        Args:
            store: Row store with the watched-movies log
            ai: Object with generate_object(messages, schema, name)
        """
        self.store = store
        self.ai = ai

    def analyze(self) -> Dict:
        """
        Analyse the watch history.

        Returns:
            {'analysis', 'genreStats', 'ratingStats', 'recommendations'}

        Raises:
            WatchAnalysisError: If loading history or the AI call fails
        """
        try:
            rows = self.store.list_watched_movies(newest_first=True)
            if not rows:
                return {
                    'analysis': EMPTY_HISTORY_ANALYSIS,
                    'genreStats': [],
                    'ratingStats': empty_rating_stats(),
                    'recommendations': list(EMPTY_HISTORY_RECOMMENDATIONS),
                }

            stats = compute_watch_stats(rows)
            prompt = build_analysis_prompt(rows, stats['genreStats'], stats['ratingStats'])
            result = self.ai.generate_object(
                [
                    {'role': 'system', 'content': SYSTEM_PROMPT},
                    {'role': 'user', 'content': prompt},
                ],
                ANALYSIS_SCHEMA,
                name='watch_analysis',
            )
        except Exception as e:
            logger.error(f"Watch analysis failed: {e}")
            raise WatchAnalysisError("Failed to analyze watched movies") from e

        narrative = (result or {}).get('object') or {}
        analysis = narrative.get('analysis')
        recommendations = narrative.get('recommendations')
        if not isinstance(recommendations, list) or not recommendations:
            recommendations = list(FALLBACK_RECOMMENDATIONS)

        return {
            'analysis': str(analysis) if analysis else FALLBACK_ANALYSIS,
            'genreStats': stats['genreStats'],
            'ratingStats': stats['ratingStats'],
            'recommendations': [str(r) for r in recommendations],
        }
