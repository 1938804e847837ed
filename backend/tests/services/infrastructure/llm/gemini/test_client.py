"""
Tests for shortmaker.services.infrastructure.llm.gemini.client

Backend selection between the Gemini API and Vertex AI.
"""

from unittest.mock import patch

import pytest

from shortmaker.core.exceptions import ConfigurationError
from shortmaker.services.infrastructure.llm.gemini.client import create_gemini_client

CLIENT_PATH = "shortmaker.services.infrastructure.llm.gemini.client.genai.Client"


class TestGeminiApiBackend:
    def test_uses_configured_key(self):
        with patch(CLIENT_PATH) as mock_client:
            create_gemini_client()
            mock_client.assert_called_once_with(api_key="mock-key")

    def test_explicit_key_wins(self):
        with patch(CLIENT_PATH) as mock_client:
            create_gemini_client(api_key="override-key")
            mock_client.assert_called_once_with(api_key="override-key")

    def test_missing_key(self, monkeypatch):
        monkeypatch.setattr("shortmaker.config.GEMINI_API_KEY", None)
        with patch(CLIENT_PATH) as mock_client:
            with pytest.raises(ConfigurationError) as exc_info:
                create_gemini_client()
        mock_client.assert_not_called()
        assert exc_info.value.fatal is True
        assert "GEMINI_API_KEY" in exc_info.value.message


class TestVertexBackend:
    def test_vertex_client(self, monkeypatch):
        monkeypatch.setattr("shortmaker.config.GCP_PROJECT_ID", "p1")
        monkeypatch.setattr("shortmaker.config.GCP_LOCATION", "l1")
        with patch(CLIENT_PATH) as mock_client:
            create_gemini_client(use_vertex_ai=True)
            mock_client.assert_called_once_with(vertexai=True, project="p1", location="l1")

    def test_vertex_requires_project(self, monkeypatch):
        monkeypatch.setattr("shortmaker.config.GCP_PROJECT_ID", None)
        with pytest.raises(ConfigurationError, match="GCP_PROJECT_ID"):
            create_gemini_client(use_vertex_ai=True)

    def test_env_flag_selects_vertex(self, monkeypatch):
        monkeypatch.setattr("shortmaker.config.USE_VERTEX_AI", True)
        monkeypatch.setattr("shortmaker.config.GCP_PROJECT_ID", "p1")
        with patch(CLIENT_PATH) as mock_client:
            create_gemini_client()
        assert mock_client.call_args.kwargs["vertexai"] is True
