"""
Genre suggestions from watch history.

Two strategies:
- comfort: genres the user already watches and rates well
- new: catalogue genres that never appear in the watch history
"""

import logging
import random
from typing import Dict, List, Optional

from utils.genres import POPULAR_GENRES, parse_stored_genres, resolve_genre_id
from utils.storage import MovieStore
from utils.tmdb import TMDBClient

logger = logging.getLogger('film_roulette')

PREFERENCES = ('comfort', 'new')
SUGGESTION_COUNT = 3

# Average ratings within this gap count as a tie; watch count decides
RATING_TIE_THRESHOLD = 0.5

NEW_GENRE_REASON = "Different from your watched genres"
POPULAR_GENRE_REASON = "Popular genre - you have no watch history yet"


def aggregate_genre_stats(rows: List[Dict]) -> List[Dict]:
    """
    Aggregate watched rows into per-genre statistics.

    Unrated movies count as watched with a rating of 0, so they pull the
    genre average down. Rows with undecodable genres are skipped.

    Args:
        rows: Watched-movie rows ('genres' JSON string, optional 'rating')

    Returns:
        List of {'genre', 'id', 'count', 'totalRating', 'averageRating'}
        dicts in first-seen order
    """
    stats: Dict[str, Dict] = {}
    for row in rows:
        rating = row.get('rating') or 0
        for name in parse_stored_genres(row.get('genres')):
            entry = stats.get(name)
            if entry is None:
                entry = stats[name] = {
                    'genre': name,
                    'id': resolve_genre_id(name),
                    'count': 0,
                    'totalRating': 0,
                    'averageRating': 0.0,
                }
            entry['count'] += 1
            entry['totalRating'] += rating
            entry['averageRating'] = entry['totalRating'] / entry['count'] if entry['count'] else 0

    return list(stats.values())


def _compare(first: Dict, second: Dict, preference: str) -> int:
    """
    Compare two genre stats for ranking.

    Returns:
        Positive if `second` should rank before `first`, negative if
        `first` should, 0 for no preference
    """
    rating_gap = first['averageRating'] - second['averageRating']
    count_gap = first['count'] - second['count']
    if preference == 'new':
        rating_gap, count_gap = -rating_gap, -count_gap

    if abs(rating_gap) <= RATING_TIE_THRESHOLD:
        return -count_gap
    return -rating_gap


def rank_genre_stats(stats: List[Dict], preference: str) -> List[Dict]:
    """
    Rank genres for a strategy.

    comfort: average rating descending; within 0.5 the more-watched
    genre wins. new: the mirror image (ascending rating, fewer watches).

    The threshold comparison is not transitive, so instead of a comparison
    sort this orders by average first and then only swaps neighbours that
    the comparator wants swapped. Two genres whose averages differ by more
    than the threshold are therefore never inverted.

    Args:
        stats: Output of aggregate_genre_stats
        preference: 'comfort' or 'new'

    Returns:
        New ranked list
    """
    ranked = sorted(stats, key=lambda s: s['averageRating'], reverse=preference == 'comfort')
    for _ in range(len(ranked)):
        swapped = False
        for i in range(len(ranked) - 1):
            if _compare(ranked[i], ranked[i + 1], preference) > 0:
                ranked[i], ranked[i + 1] = ranked[i + 1], ranked[i]
                swapped = True
        if not swapped:
            break
    return ranked


def _plural(count: int) -> str:
    return "movie" if count == 1 else "movies"


def comfort_reason(stat: Dict) -> str:
    """Explain a comfort suggestion by watch count and (if rated) average."""
    count = stat['count']
    if stat['totalRating'] > 0:
        return (f"You watched {count} {_plural(count)} in this genre "
                f"with an average rating of {stat['averageRating']:.1f}")
    return f"You watched {count} {_plural(count)} in this genre"


def _join_names(names: List[str]) -> str:
    if len(names) <= 1:
        return ''.join(names)
    return f"{', '.join(names[:-1])} and {names[-1]}"


def cold_start_suggestion() -> Dict:
    """Fixed popular-genre answer for an empty watch history."""
    return {
        'suggestedGenres': [
            {'id': g['id'], 'name': g['name'], 'reason': POPULAR_GENRE_REASON}
            for g in POPULAR_GENRES
        ],
        'analysis': ("You haven't watched any movies yet, so here are some popular genres "
                     "to start with."),
    }


class GenreSuggester:
    """Suggests genres to explore based on the watched-movies log."""

    def __init__(self, store: MovieStore, tmdb: Optional[TMDBClient] = None,
                 rng: Optional[random.Random] = None):
        """
        Args:
            store: Row store with the watched-movies log
            tmdb: TMDB client, needed only for the 'new' strategy
            rng: Random source, injectable for tests
        """
        self.store = store
        self.tmdb = tmdb
        self.rng = rng or random.Random()

    def suggest(self, preference: str) -> Dict:
        """
        Suggest up to three genres.

        With no usable genre history the fixed popular genres come back
        for either preference. That includes a history whose rows all
        lack decodable genres, so 'new' then skips the TMDB catalogue.

        Args:
            preference: 'comfort' or 'new'

        Returns:
            {'suggestedGenres': [{'id', 'name', 'reason'}], 'analysis': str}

        Raises:
            ValueError: For an unknown preference
            TMDBAPIError: If the 'new' strategy cannot load the catalogue
        """
        if preference not in PREFERENCES:
            raise ValueError(f"Preference must be one of {', '.join(PREFERENCES)}")

        rows = self.store.list_watched_movies(newest_first=True)
        stats = aggregate_genre_stats(rows)
        if not stats:
            logger.info("No genre history, suggesting popular genres")
            return cold_start_suggestion()

        ranked = rank_genre_stats(stats, preference)
        if preference == 'comfort':
            return self._suggest_comfort(ranked)
        return self._suggest_new(ranked)

    def _suggest_comfort(self, ranked: List[Dict]) -> Dict:
        top = ranked[:SUGGESTION_COUNT]
        return {
            'suggestedGenres': [
                {'id': s['id'], 'name': s['genre'], 'reason': comfort_reason(s)}
                for s in top
            ],
            'analysis': (f"Based on your history, your favorite genres are "
                         f"{_join_names([s['genre'] for s in top])}."),
        }

    def _suggest_new(self, ranked: List[Dict]) -> Dict:
        if self.tmdb is None:
            raise ValueError("A TMDB client is required for 'new' suggestions")

        # Any genre seen in history is excluded, rated or not
        watched = {s['genre'].lower() for s in ranked}
        catalogue = [g for g in self.tmdb.list_genres() if g['name'].lower() not in watched]
        self.rng.shuffle(catalogue)
        picks = catalogue[:SUGGESTION_COUNT]

        if not picks:
            analysis = "You have already watched every genre in the catalogue."
        else:
            analysis = (f"These genres are different from what you usually watch: "
                        f"{_join_names([g['name'] for g in picks])}.")
        return {
            'suggestedGenres': [
                {'id': g['id'], 'name': g['name'], 'reason': NEW_GENRE_REASON}
                for g in picks
            ],
            'analysis': analysis,
        }
