"""Tests for recommenders/suggestions.py"""

import random
import pytest
from unittest.mock import Mock

from recommenders.suggestions import (
    NEW_GENRE_REASON,
    POPULAR_GENRE_REASON,
    RATING_TIE_THRESHOLD,
    GenreSuggester,
    aggregate_genre_stats,
    comfort_reason,
    rank_genre_stats,
)
from utils.genres import DEFAULT_GENRE_ID
from utils.storage import MovieStore
from utils.tmdb import TMDBAPIError

CATALOGUE = [
    {'id': 28, 'name': 'Ação'},
    {'id': 35, 'name': 'Comédia'},
    {'id': 18, 'name': 'Drama'},
    {'id': 27, 'name': 'Terror'},
    {'id': 99, 'name': 'Documentário'},
    {'id': 37, 'name': 'Faroeste'},
]


@pytest.fixture
def store():
    s = MovieStore(':memory:')
    yield s
    s.close()


def watch(store, movie_id, genres, rating=None):
    store.insert_watched_movie(movie_id, f"Filme {movie_id}", None, genres)
    if rating is not None:
        store.update_watched_rating(movie_id, rating)


def stat(genre, count, average):
    return {'genre': genre, 'id': 0, 'count': count, 'totalRating': average * count, 'averageRating': average}


def keep_order_rng():
    rng = Mock()
    rng.shuffle.side_effect = lambda seq: None
    return rng


class TestAggregateGenreStats:
    """Tests for aggregate_genre_stats function"""

    def test_skips_malformed_rows(self):
        rows = [
            {'genres': '["Drama"]'},
            {'genres': 'not-json'},
            {'genres': '["Drama","Comedy"]'},
        ]

        stats = {s['genre']: s for s in aggregate_genre_stats(rows)}

        assert stats['Drama']['count'] == 2
        assert stats['Comedy']['count'] == 1

    def test_unrated_counts_as_zero(self):
        rows = [
            {'genres': '["Ação"]', 'rating': 5},
            {'genres': '["Ação"]', 'rating': None},
        ]

        stats = aggregate_genre_stats(rows)

        assert stats[0]['count'] == 2
        assert stats[0]['totalRating'] == 5
        assert stats[0]['averageRating'] == 2.5

    def test_resolves_ids(self):
        rows = [{'genres': '["Terror", "Horror"]', 'rating': 4}]

        stats = {s['genre']: s for s in aggregate_genre_stats(rows)}

        assert stats['Terror']['id'] == 27
        assert stats['Horror']['id'] == DEFAULT_GENRE_ID

    def test_empty(self):
        assert aggregate_genre_stats([]) == []
        assert aggregate_genre_stats([{'genres': None}]) == []


class TestRankGenreStats:
    """Tests for rank_genre_stats function"""

    def test_comfort_orders_by_rating(self):
        stats = [stat('A', 1, 2.0), stat('B', 1, 4.5), stat('C', 1, 3.0)]
        assert [s['genre'] for s in rank_genre_stats(stats, 'comfort')] == ['B', 'C', 'A']

    def test_comfort_close_ratings_prefer_more_watched(self):
        stats = [stat('Rare', 1, 4.5), stat('Frequent', 6, 4.2)]
        assert [s['genre'] for s in rank_genre_stats(stats, 'comfort')] == ['Frequent', 'Rare']

    def test_comfort_gap_above_threshold_ignores_count(self):
        stats = [stat('Frequent', 6, 3.9), stat('Rare', 1, 4.5)]
        assert [s['genre'] for s in rank_genre_stats(stats, 'comfort')] == ['Rare', 'Frequent']

    def test_threshold_is_inclusive(self):
        stats = [stat('Rare', 1, 4.5), stat('Frequent', 6, 4.0)]
        assert [s['genre'] for s in rank_genre_stats(stats, 'comfort')] == ['Frequent', 'Rare']

    def test_new_is_mirror_image(self):
        stats = [stat('A', 1, 4.5), stat('B', 3, 1.0), stat('C', 1, 1.2)]
        assert [s['genre'] for s in rank_genre_stats(stats, 'new')] == ['C', 'B', 'A']

    def test_does_not_mutate_input(self):
        stats = [stat('A', 1, 2.0), stat('B', 1, 4.5)]
        rank_genre_stats(stats, 'comfort')
        assert [s['genre'] for s in stats] == ['A', 'B']

    def test_comfort_never_inverts_clear_rating_gaps(self):
        rng = random.Random(1234)
        for _ in range(200):
            stats = [
                stat(f"G{i}", rng.randint(1, 10), rng.choice([0, 1.0, 1.5, 2.0, 2.4, 3.0, 3.3, 3.5, 4.0, 4.6, 5.0]))
                for i in range(rng.randint(2, 8))
            ]

            ranked = rank_genre_stats(stats, 'comfort')

            for i, earlier in enumerate(ranked):
                for later in ranked[i + 1:]:
                    assert not (later['averageRating'] - earlier['averageRating'] > RATING_TIE_THRESHOLD
                                and later['count'] < earlier['count'])
                    assert later['averageRating'] - earlier['averageRating'] <= RATING_TIE_THRESHOLD


class TestComfortReason:
    """Tests for comfort_reason function"""

    def test_with_rating(self):
        assert comfort_reason(stat('Ação', 2, 4.0)) == \
            "You watched 2 movies in this genre with an average rating of 4.0"

    def test_without_rating(self):
        assert comfort_reason(stat('Drama', 1, 0)) == "You watched 1 movie in this genre"


class TestColdStart:
    """Empty history falls back to fixed popular genres"""

    @pytest.mark.parametrize('preference', ['comfort', 'new'])
    def test_empty_history(self, store, preference):
        tmdb = Mock()

        result = GenreSuggester(store, tmdb).suggest(preference)

        assert [g['id'] for g in result['suggestedGenres']] == [28, 35, 18]
        assert all(g['reason'] == POPULAR_GENRE_REASON for g in result['suggestedGenres'])
        assert result['analysis']
        tmdb.list_genres.assert_not_called()

    def test_history_without_decodable_genres(self, store):
        store.insert_watched_movie(1, 'Sem gênero')

        result = GenreSuggester(store).suggest('comfort')

        assert len(result['suggestedGenres']) == 3
        assert result['suggestedGenres'][0]['reason'] == POPULAR_GENRE_REASON

    def test_new_without_decodable_genres_skips_catalogue(self, store):
        store.insert_watched_movie(1, 'Sem gênero')
        store.conn.execute("UPDATE watched_movies SET genres = 'not-json'")
        tmdb = Mock()

        result = GenreSuggester(store, tmdb).suggest('new')

        assert [g['id'] for g in result['suggestedGenres']] == [28, 35, 18]
        tmdb.list_genres.assert_not_called()


class TestComfortSuggestions:
    """Tests for the comfort strategy"""

    def test_top_three(self, store):
        watch(store, 1, ['Ação'], 5)
        watch(store, 2, ['Ação'], 5)
        watch(store, 3, ['Drama'], 3)
        watch(store, 4, ['Terror'], 1)
        watch(store, 5, ['Comédia'], 4)

        result = GenreSuggester(store).suggest('comfort')

        names = [g['name'] for g in result['suggestedGenres']]
        assert names == ['Ação', 'Comédia', 'Drama']
        assert result['suggestedGenres'][0] == {
            'id': 28,
            'name': 'Ação',
            'reason': "You watched 2 movies in this genre with an average rating of 5.0",
        }
        assert result['analysis'] == \
            "Based on your history, your favorite genres are Ação, Comédia and Drama."

    def test_fewer_than_three_genres(self, store):
        watch(store, 1, ['Drama'])

        result = GenreSuggester(store).suggest('comfort')

        assert result['suggestedGenres'] == [
            {'id': 18, 'name': 'Drama', 'reason': "You watched 1 movie in this genre"},
        ]
        assert result['analysis'] == "Based on your history, your favorite genres are Drama."

    def test_invalid_preference(self, store):
        with pytest.raises(ValueError):
            GenreSuggester(store).suggest('popular')


class TestNewSuggestions:
    """Tests for the new strategy"""

    def test_excludes_watched_genres(self, store):
        watch(store, 1, ['Ação', 'drama'], 5)
        tmdb = Mock()
        tmdb.list_genres.return_value = CATALOGUE

        result = GenreSuggester(store, tmdb, rng=keep_order_rng()).suggest('new')

        assert [g['name'] for g in result['suggestedGenres']] == ['Comédia', 'Terror', 'Documentário']
        assert all(g['reason'] == NEW_GENRE_REASON for g in result['suggestedGenres'])
        assert result['analysis'] == ("These genres are different from what you usually watch: "
                                      "Comédia, Terror and Documentário.")

    def test_unrated_genres_are_excluded_too(self, store):
        watch(store, 1, ['Comédia'])
        tmdb = Mock()
        tmdb.list_genres.return_value = CATALOGUE

        result = GenreSuggester(store, tmdb, rng=keep_order_rng()).suggest('new')

        assert 'Comédia' not in [g['name'] for g in result['suggestedGenres']]

    def test_random_order_from_candidates(self, store):
        watch(store, 1, ['Ação'], 4)
        tmdb = Mock()
        tmdb.list_genres.return_value = CATALOGUE

        result = GenreSuggester(store, tmdb, rng=random.Random(3)).suggest('new')

        names = [g['name'] for g in result['suggestedGenres']]
        assert len(names) == 3
        assert len(set(names)) == 3
        assert 'Ação' not in names

    def test_everything_watched(self, store):
        for i, genre in enumerate(CATALOGUE, 1):
            watch(store, i, [genre['name']])
        tmdb = Mock()
        tmdb.list_genres.return_value = CATALOGUE

        result = GenreSuggester(store, tmdb).suggest('new')

        assert result['suggestedGenres'] == []
        assert result['analysis'] == "You have already watched every genre in the catalogue."

    def test_gateway_error_propagates(self, store):
        watch(store, 1, ['Ação'], 4)
        tmdb = Mock()
        tmdb.list_genres.side_effect = TMDBAPIError("TMDB: invalid API key", status_code=401)

        with pytest.raises(TMDBAPIError):
            GenreSuggester(store, tmdb).suggest('new')

    def test_requires_tmdb_client(self, store):
        watch(store, 1, ['Ação'], 4)

        with pytest.raises(ValueError):
            GenreSuggester(store).suggest('new')
