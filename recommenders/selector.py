"""
Random movie recommendation with genre filters.

Picks one movie from a single TMDB discovery page, then enriches it with
genres, trailers and streaming providers. Enrichment and the log write
are best-effort; only the discovery call can fail the recommendation.
"""

import logging
import random
from typing import List, Optional

from utils.storage import MovieStore
from utils.tmdb import TMDBClient, poster_url

from .results import Recommendation, soft_call

logger = logging.getLogger('film_roulette')

MIN_INCLUDED_GENRES = 1
MAX_INCLUDED_GENRES = 3


class InvalidGenreSelectionError(ValueError):
    """Raised when the genre filter is invalid (checked before any network call)."""
    pass


class NoMoviesFoundError(Exception):
    """Raised when discovery returns no movies for the filters."""
    pass


def validate_genre_selection(include_genre_ids: List[int],
                             exclude_genre_ids: Optional[List[int]] = None) -> None:
    """
    Check a genre filter.

    Raises:
        InvalidGenreSelectionError: If include has fewer than 1 or more
            than 3 IDs, or any ID is not an integer
    """
    include_genre_ids = include_genre_ids or []
    if not MIN_INCLUDED_GENRES <= len(include_genre_ids) <= MAX_INCLUDED_GENRES:
        raise InvalidGenreSelectionError(
            f"Select between {MIN_INCLUDED_GENRES} and {MAX_INCLUDED_GENRES} genres "
            f"(got {len(include_genre_ids)})"
        )
    for genre_id in list(include_genre_ids) + list(exclude_genre_ids or []):
        if isinstance(genre_id, bool) or not isinstance(genre_id, int):
            raise InvalidGenreSelectionError(f"Genre IDs must be integers (got {genre_id!r})")


class MovieSelector:
    """Recommends a random movie matching include/exclude genre filters."""

    def __init__(self, tmdb: TMDBClient, store: Optional[MovieStore] = None,
                 rng: Optional[random.Random] = None):
        """
        Args:
            tmdb: TMDB client
            store: Row store for the recommendation log (no logging if None)
            rng: Random source, injectable for tests
        """
        self.tmdb = tmdb
        self.store = store
        self.rng = rng or random.Random()

    def recommend(self, include_genre_ids: List[int],
                  exclude_genre_ids: Optional[List[int]] = None) -> Recommendation:
        """
        Pick and enrich a random movie.

        Args:
            include_genre_ids: 1-3 genre IDs every candidate must have
            exclude_genre_ids: Genre IDs no candidate may have

        Returns:
            Recommendation (enrichment fields may be absent)

        Raises:
            InvalidGenreSelectionError: Before any request, for a bad filter
            TMDBAPIError: If the discovery request fails
            NoMoviesFoundError: If the discovery page is empty
        """
        validate_genre_selection(include_genre_ids, exclude_genre_ids)

        results = self.tmdb.discover(include_genre_ids, exclude_genre_ids)
        if not results:
            raise NoMoviesFoundError("No movies found for the selected genres")

        # The pool is the first result page only
        movie = self.rng.choice(results)
        recommendation = Recommendation(
            movie_id=movie['id'],
            title=movie.get('title', ''),
            overview=movie.get('overview', ''),
            poster_url=poster_url(movie.get('poster_path')),
        )
        logger.info(f"Picked '{recommendation.title}' ({recommendation.movie_id}) from {len(results)} candidates")

        self._enrich(recommendation)
        self._log(recommendation)
        return recommendation

    def _enrich(self, recommendation: Recommendation) -> None:
        """Fetch genres, trailers and providers, one after another."""
        lookups = [
            ('genres', "fetch movie genres", self.tmdb.movie_genre_names),
            ('videos', "fetch movie videos", self.tmdb.movie_videos),
            ('watch_providers', "fetch watch providers", self.tmdb.watch_providers),
        ]
        for attribute, label, lookup in lookups:
            result = soft_call(label, lookup, recommendation.movie_id)
            if result.ok:
                setattr(recommendation, attribute, result.value or None)
            else:
                recommendation.failures[attribute] = result.error

    def _log(self, recommendation: Recommendation) -> None:
        """Record the pick in the recommendation log (best-effort)."""
        if self.store is None:
            return
        result = soft_call(
            "save recommended movie",
            self.store.insert_recommended_movie,
            recommendation.movie_id,
            recommendation.title,
            recommendation.poster_url or None,
            recommendation.genres,
        )
        recommendation.saved = result.ok
        if not result.ok:
            recommendation.failures['saved'] = result.error
