"""
Watch history and recommendation log for Film Roulette.
"""

import logging
from typing import Dict, List, Optional

from utils.genres import parse_stored_genres
from utils.helpers import format_timestamp
from utils.storage import MovieStore

logger = logging.getLogger('film_roulette')

MIN_RATING = 1
MAX_RATING = 5


class InvalidRatingError(ValueError):
    """Raised when a rating is outside the 1-5 range."""
    pass


def serialize_movie_row(row: Dict) -> Dict:
    """
    Convert a stored movie row to the response shape.

    Args:
        row: Row dict from the store

    Returns:
        Dict with camelCase keys, decoded genres and ISO createdAt
    """
    movie = {
        'id': row['id'],
        'movieId': row['movie_id'],
        'title': row['title'],
        'poster': row.get('poster'),
        'genres': parse_stored_genres(row.get('genres')),
        'createdAt': format_timestamp(row.get('created_at')),
    }
    if 'rating' in row:
        movie['rating'] = row['rating']
    return movie


class WatchHistory:
    """Add/remove/list/rate operations over the watched-movies log."""

    def __init__(self, store: MovieStore):
        self.store = store

    def add(self, movie_id: int, title: str, poster: Optional[str] = None,
            genres: Optional[List[str]] = None) -> Dict:
        """
        Mark a movie as watched.

        Raises:
            DuplicateMovieError: If the movie is already in the list
        """
        row_id = self.store.insert_watched_movie(movie_id, title, poster, genres)
        logger.info(f"Added '{title}' ({movie_id}) to watched movies")
        return {'success': True, 'id': row_id}

    def remove(self, movie_id: int) -> Dict:
        """
        Remove a movie from the watched list.

        Raises:
            MovieNotFoundError: If the movie is not in the list
        """
        self.store.delete_watched_movie(movie_id)
        logger.info(f"Removed movie {movie_id} from watched movies")
        return {'success': True}

    def list(self) -> List[Dict]:
        """List watched movies, oldest first."""
        return [serialize_movie_row(row) for row in self.store.list_watched_movies()]

    def rate(self, movie_id: int, rating: int) -> Dict:
        """
        Rate a watched movie.

        Args:
            movie_id: TMDB movie ID
            rating: Whole stars, 1-5

        Returns:
            {'success': True, 'message': ...}

        Raises:
            InvalidRatingError: If rating is not an integer in 1-5
            MovieNotFoundError: If the movie is not in the list
        """
        if isinstance(rating, bool) or not isinstance(rating, int) or not MIN_RATING <= rating <= MAX_RATING:
            raise InvalidRatingError(f"Rating must be a whole number from {MIN_RATING} to {MAX_RATING}")
        self.store.update_watched_rating(movie_id, rating)
        logger.info(f"Rated movie {movie_id} with {rating}/5")
        return {'success': True, 'message': f"Rating updated to {rating}/5"}


class RecommendationLog:
    """Append-only log of recommended movies."""

    def __init__(self, store: MovieStore):
        self.store = store

    def save(self, movie_id: int, title: str, poster: Optional[str] = None,
             genres: Optional[List[str]] = None) -> Dict:
        """Append a recommendation; storage failures propagate."""
        row_id = self.store.insert_recommended_movie(movie_id, title, poster, genres)
        return {'success': True, 'id': row_id}

    def list(self) -> List[Dict]:
        """List recommended movies, oldest first."""
        return [serialize_movie_row(row) for row in self.store.list_recommended_movies()]
