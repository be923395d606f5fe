"""Tests for utils/api_client.py - shared HTTP client behaviour."""

import pytest
from unittest.mock import Mock, patch
import requests

from utils.api_client import APIError, BaseAPIClient


class DummyError(APIError):
    pass


class DummyClient(BaseAPIClient):
    api_name = "Dummy API"
    exception_class = DummyError
    request_timeout = 7


def make_response(status_code, json_data=None, text=''):
    response = Mock()
    response.status_code = status_code
    response.text = text
    if isinstance(json_data, Exception):
        response.json.side_effect = json_data
    else:
        response.json.return_value = json_data
    return response


class TestBaseAPIClientInit:
    """Tests for client initialization."""

    def test_strips_trailing_slash(self):
        client = DummyClient("http://example.com/api/")
        assert client.base_url == "http://example.com/api"

    def test_uses_class_timeout_by_default(self):
        assert DummyClient("http://x").request_timeout == 7

    def test_timeout_override(self):
        assert DummyClient("http://x", timeout=3).request_timeout == 3

    def test_build_url(self):
        client = DummyClient("http://example.com/api")
        assert client._build_url("/movies/1") == "http://example.com/api/movies/1"
        assert client._build_url("movies") == "http://example.com/api/movies"


class TestMakeRequest:
    """Tests for _make_request."""

    @patch('utils.api_client.requests.request')
    def test_successful_request(self, mock_request):
        mock_request.return_value = make_response(200, {"status": "ok"})

        client = DummyClient("http://example.com")
        result = client._make_request("GET", "status", params={'a': 1})

        assert result == {"status": "ok"}
        kwargs = mock_request.call_args.kwargs
        assert kwargs['method'] == "GET"
        assert kwargs['url'] == "http://example.com/status"
        assert kwargs['params'] == {'a': 1}
        assert kwargs['timeout'] == 7

    @patch('utils.api_client.requests.request')
    def test_single_attempt_only(self, mock_request):
        mock_request.return_value = make_response(500, {'message': 'boom'}, text='{"message": "boom"}')

        client = DummyClient("http://example.com")
        with pytest.raises(DummyError):
            client._make_request("GET", "status")

        assert mock_request.call_count == 1

    @patch('utils.api_client.requests.request')
    def test_unauthorized_raises_error(self, mock_request):
        mock_request.return_value = make_response(401, text='denied')

        client = DummyClient("http://example.com")
        with pytest.raises(DummyError, match="invalid API key") as exc_info:
            client._make_request("GET", "status")

        assert exc_info.value.status_code == 401

    @patch('utils.api_client.requests.request')
    def test_error_carries_status_and_body(self, mock_request):
        body = '{"status_message": "The resource you requested could not be found."}'
        mock_request.return_value = make_response(
            404, {'status_message': 'The resource you requested could not be found.'}, text=body
        )

        client = DummyClient("http://example.com")
        with pytest.raises(DummyError, match="404: The resource") as exc_info:
            client._make_request("GET", "movie/0")

        assert exc_info.value.status_code == 404
        assert exc_info.value.body == body

    @patch('utils.api_client.requests.request')
    def test_nested_error_message(self, mock_request):
        mock_request.return_value = make_response(
            429, {'error': {'message': 'Rate limit reached'}}, text='...'
        )

        client = DummyClient("http://example.com")
        with pytest.raises(DummyError, match="Rate limit reached"):
            client._make_request("POST", "chat/completions", data={})

    @patch('utils.api_client.requests.request')
    def test_unparseable_error_body_uses_text(self, mock_request):
        mock_request.return_value = make_response(502, ValueError("no json"), text='Bad Gateway')

        client = DummyClient("http://example.com")
        with pytest.raises(DummyError, match="Bad Gateway"):
            client._make_request("GET", "status")

    @patch('utils.api_client.requests.request')
    def test_204_returns_none(self, mock_request):
        mock_request.return_value = make_response(204)

        client = DummyClient("http://example.com")
        assert client._make_request("DELETE", "thing/1") is None

    @patch('utils.api_client.requests.request')
    def test_non_json_success_raises(self, mock_request):
        mock_request.return_value = make_response(200, ValueError("no json"), text='<html>')

        client = DummyClient("http://example.com")
        with pytest.raises(DummyError, match="non-JSON"):
            client._make_request("GET", "status")

    @patch('utils.api_client.requests.request')
    def test_timeout_raises_error(self, mock_request):
        mock_request.side_effect = requests.exceptions.Timeout()

        client = DummyClient("http://example.com")
        with pytest.raises(DummyError, match="timeout after 7s"):
            client._make_request("GET", "status")

    @patch('utils.api_client.requests.request')
    def test_connection_error_raises_error(self, mock_request):
        mock_request.side_effect = requests.exceptions.ConnectionError()

        client = DummyClient("http://example.com")
        with pytest.raises(DummyError, match="Could not connect"):
            client._make_request("GET", "status")

    @patch('utils.api_client.requests.request')
    def test_other_request_error_raises_error(self, mock_request):
        mock_request.side_effect = requests.exceptions.InvalidURL("bad url")

        client = DummyClient("http://example.com")
        with pytest.raises(DummyError, match="request failed"):
            client._make_request("GET", "status")
