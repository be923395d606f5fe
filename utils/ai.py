"""
AI text service client for Film Roulette.
Requests structured JSON objects from an OpenAI-compatible chat completions API.
"""

import json
import logging
from typing import Dict, List, Optional

from .api_client import APIError, BaseAPIClient
from .config import DEFAULT_AI_URL, ConfigurationError, get_ai_config

logger = logging.getLogger('film_roulette')


class AIServiceError(APIError):
    """Raised when an AI service request fails."""
    pass


class AIClient(BaseAPIClient):
    """
    Chat completions client that asks for schema-shaped JSON output.

    Any OpenAI-compatible endpoint works (OpenAI, OpenRouter, local
    servers such as Ollama or vLLM).
    """

    api_name = "AI service"
    exception_class = AIServiceError
    request_timeout = 60

    def __init__(self, url: str, api_key: Optional[str], model: str,
                 timeout: Optional[int] = None):
        """
        Initialize AI client.

        Args:
            url: API base URL (e.g., https://api.openai.com/v1)
            api_key: Bearer token; may be empty for local servers
            model: Model name to request
            timeout: Per-request timeout in seconds
        """
        super().__init__(url, timeout)
        self.api_key = api_key
        self.model = model

    def _get_headers(self) -> Dict[str, str]:
        """Get headers for API requests."""
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def generate_object(self, messages: List[Dict], schema: Dict,
                        name: str = 'response') -> Dict:
        """
        Generate a JSON object matching a schema.

        Args:
            messages: Chat messages ({'role', 'content'} dicts)
            schema: JSON schema the reply must follow
            name: Schema name sent to the service

        Returns:
            {'object': dict} on success, {'object': None} when the reply
            carried no decodable JSON object

        Raises:
            AIServiceError: If the request itself fails
        """
        payload = {
            'model': self.model,
            'messages': messages,
            'response_format': {
                'type': 'json_schema',
                'json_schema': {'name': name, 'schema': schema},
            },
        }
        data = self._make_request("POST", "chat/completions", data=payload) or {}

        try:
            content = data['choices'][0]['message']['content']
        except (KeyError, IndexError, TypeError):
            logger.warning("AI service reply had no message content")
            return {'object': None}

        try:
            parsed = json.loads(content) if content else None
        except (TypeError, ValueError) as e:
            logger.warning(f"AI service reply was not valid JSON: {e}")
            return {'object': None}

        if not isinstance(parsed, dict):
            return {'object': None}
        return {'object': parsed}


def create_ai_client(config: Dict) -> AIClient:
    """
    Create an AI client from config.

    Args:
        config: Root configuration dict

    Returns:
        Configured AIClient

    Raises:
        ConfigurationError: If no service URL is configured, or the
            hosted default is used without a key
    """
    ai_config = get_ai_config(config)
    if not ai_config['url']:
        raise ConfigurationError("AI service URL not configured. Set ai.url or AI_API_URL.")
    if not ai_config['api_key'] and ai_config['url'].rstrip('/') == DEFAULT_AI_URL:
        raise ConfigurationError("AI API key not configured. Set ai.api_key or AI_API_KEY.")
    return AIClient(
        url=ai_config['url'],
        api_key=ai_config['api_key'],
        model=ai_config['model'],
        timeout=ai_config['request_timeout'],
    )
