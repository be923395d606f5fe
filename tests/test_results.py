"""Tests for recommenders/results.py"""

from unittest.mock import Mock

from recommenders.results import Recommendation, SoftResult, soft_call


class TestSoftCall:
    """Tests for soft_call function"""

    def test_returns_value(self):
        result = soft_call("fetch thing", lambda x: x * 2, 21)
        assert result.ok
        assert result.value == 42

    def test_captures_error(self, caplog):
        func = Mock(side_effect=RuntimeError("boom"))

        result = soft_call("fetch thing", func, 1, key='v')

        assert not result.ok
        assert result.value is None
        assert result.error == "boom"
        func.assert_called_once_with(1, key='v')
        assert "Could not fetch thing: boom" in caplog.text

    def test_default_is_ok(self):
        assert SoftResult().ok


class TestRecommendation:
    """Tests for the Recommendation dataclass"""

    def test_minimal_dict(self):
        rec = Recommendation(movie_id=5, title="Filme", overview="Sinopse", poster_url="http://p")
        assert rec.to_dict() == {
            'movieId': 5,
            'title': "Filme",
            'overview': "Sinopse",
            'posterUrl': "http://p",
        }

    def test_enrichment_fields_included_when_present(self):
        rec = Recommendation(
            movie_id=5, title="Filme",
            genres=['Drama'],
            videos=[{'key': 'a'}],
            watch_providers={'flatrate': []},
        )
        data = rec.to_dict()
        assert data['genres'] == ['Drama']
        assert data['videos'] == [{'key': 'a'}]
        assert data['watchProviders'] == {'flatrate': []}

    def test_degraded(self):
        rec = Recommendation(movie_id=5, title="Filme")
        assert not rec.degraded
        rec.failures['videos'] = 'timeout'
        assert rec.degraded

    def test_failures_not_shared(self):
        first = Recommendation(movie_id=1, title="A")
        second = Recommendation(movie_id=2, title="B")
        first.failures['genres'] = 'x'
        assert second.failures == {}
