"""Tests for recommenders/reviews.py"""

import pytest
from unittest.mock import Mock

from recommenders.reviews import (
    FALLBACK_TEXT,
    MAX_REVIEWS,
    NO_REVIEWS,
    ReviewAnalysisError,
    ReviewSummarizer,
)
from utils.tmdb import TMDBAPIError


def make_tmdb(reviews):
    tmdb = Mock()
    tmdb.movie_reviews.return_value = reviews
    return tmdb


def make_ai(obj):
    ai = Mock()
    ai.generate_object.return_value = {'object': obj}
    return ai


REVIEWS = [
    {'author': 'ana', 'content': 'Excelente!'},
    {'author': 'bruno', 'content': 'Muito longo.'},
]


class TestReviewSummarizer:
    """Tests for ReviewSummarizer.summarize"""

    def test_summary(self):
        ai = make_ai({'summary': 'Mostly loved.', 'sentiment': 'positive', 'keyPoints': ['Great cast']})

        result = ReviewSummarizer(make_tmdb(REVIEWS), ai).summarize(550)

        assert result == {'summary': 'Mostly loved.', 'sentiment': 'positive', 'keyPoints': ['Great cast']}
        messages = ai.generate_object.call_args.args[0]
        assert 'ana: Excelente!' in messages[1]['content']
        assert ai.generate_object.call_args.kwargs['name'] == 'review_summary'

    def test_no_reviews_skips_ai(self):
        ai = make_ai({})

        result = ReviewSummarizer(make_tmdb([]), ai).summarize(550)

        assert result == NO_REVIEWS
        ai.generate_object.assert_not_called()
        # Callers may mutate the result safely
        result['keyPoints'].append('x')
        assert NO_REVIEWS['keyPoints'] == ["Not enough reviews for analysis"]

    def test_only_first_reviews_sent(self):
        reviews = [{'author': f"user{i}", 'content': 'ok'} for i in range(MAX_REVIEWS + 5)]
        ai = make_ai({'summary': 's', 'sentiment': 'mixed', 'keyPoints': []})

        ReviewSummarizer(make_tmdb(reviews), ai).summarize(550)

        content = ai.generate_object.call_args.args[0][1]['content']
        assert f"user{MAX_REVIEWS - 1}:" in content
        assert f"user{MAX_REVIEWS}:" not in content

    def test_missing_object_raises(self):
        with pytest.raises(ReviewAnalysisError):
            ReviewSummarizer(make_tmdb(REVIEWS), make_ai(None)).summarize(550)

    def test_unknown_sentiment_becomes_neutral(self):
        ai = make_ai({'summary': 's', 'sentiment': 'ecstatic', 'keyPoints': ['a']})

        assert ReviewSummarizer(make_tmdb(REVIEWS), ai).summarize(550)['sentiment'] == 'neutral'

    def test_missing_fields_fall_back(self):
        ai = make_ai({'sentiment': 'negative'})

        result = ReviewSummarizer(make_tmdb(REVIEWS), ai).summarize(550)

        assert result == {'summary': FALLBACK_TEXT, 'sentiment': 'negative', 'keyPoints': [FALLBACK_TEXT]}

    def test_tmdb_error_propagates(self):
        tmdb = Mock()
        tmdb.movie_reviews.side_effect = TMDBAPIError("TMDB error 404: not found", status_code=404)

        with pytest.raises(TMDBAPIError):
            ReviewSummarizer(tmdb, make_ai({})).summarize(1)
