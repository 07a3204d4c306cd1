"""Tests for I/O utilities."""

from unittest.mock import patch

import pytest
import requests

from ensosnow.exceptions import SourceUnavailableError
from ensosnow.utils.io import fetch_text, get_data_path


class TestGetDataPath:
    """Tests for get_data_path function."""

    def test_data_stage(self, tmp_path):
        """Should return <base>/data."""
        assert get_data_path(tmp_path, "data") == tmp_path / "data"

    def test_figures_stage(self, tmp_path):
        """Should return <base>/figures."""
        assert get_data_path(tmp_path, "figures") == tmp_path / "figures"

    def test_cache_stage(self, tmp_path):
        """Should nest the cache under data."""
        assert get_data_path(tmp_path, "cache") == tmp_path / "data" / "cache"

    def test_creates_directory(self, tmp_path):
        """Should create directory if it doesn't exist."""
        path = get_data_path(tmp_path / "new_run", "cache")
        assert path.is_dir()

    def test_default_stage(self, tmp_path):
        """Should use 'data' as default stage."""
        assert get_data_path(tmp_path).name == "data"

    def test_invalid_stage(self, tmp_path):
        """Should raise ValueError for invalid stage."""
        with pytest.raises(ValueError, match="Invalid stage"):
            get_data_path(tmp_path, "raw")


class TestFetchText:
    """Tests for fetch_text function."""

    @patch("ensosnow.utils.io.requests.get")
    def test_returns_body(self, mock_get, mock_response):
        """Should return the response text."""
        mock_get.return_value = mock_response("<html></html>")

        text = fetch_text("https://example.com/page", timeout=5, params={"Year": 2015})

        assert text == "<html></html>"
        mock_get.assert_called_once_with(
            "https://example.com/page", params={"Year": 2015}, timeout=5
        )

    @patch("ensosnow.utils.io.requests.get")
    def test_http_error(self, mock_get, mock_response):
        """Should raise SourceUnavailableError on HTTP error status."""
        mock_get.return_value = mock_response("", status_code=503)

        with pytest.raises(SourceUnavailableError, match="example.com"):
            fetch_text("https://example.com/page", timeout=5)

    @patch("ensosnow.utils.io.requests.get")
    def test_connection_error(self, mock_get):
        """Should raise SourceUnavailableError on connection failure."""
        mock_get.side_effect = requests.ConnectionError("connection refused")

        with pytest.raises(SourceUnavailableError, match="connection refused"):
            fetch_text("https://example.com/page", timeout=5)
