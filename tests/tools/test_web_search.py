"""Tests for web grounding search."""

from unittest.mock import patch

import pytest

from aetheria.tools.web_search import format_results, search_grounding


class TestSearchGrounding:
    @pytest.mark.asyncio
    async def test_successful_search(self):
        """Test grounding returns formatted results."""
        mock_results = [
            {"title": "TCP - Wikipedia", "href": "https://en.wikipedia.org/wiki/TCP", "body": "T"},
            {"title": "RFC 9293", "href": "https://rfc-editor.org/rfc/rfc9293", "body": "TCP"},
        ]

        with patch("aetheria.tools.web_search.DDGS") as mock_ddgs:
            instance = mock_ddgs.return_value.__enter__.return_value
            instance.text.return_value = mock_results

            result = await search_grounding("tcp handshake", max_results=5)

            assert result.ok
            assert "1. TCP - Wikipedia" in result.value
            assert "https://rfc-editor.org/rfc/rfc9293" in result.value

    @pytest.mark.asyncio
    async def test_no_results(self):
        """Test grounding with no results is a failure."""
        with patch("aetheria.tools.web_search.DDGS") as mock_ddgs:
            instance = mock_ddgs.return_value.__enter__.return_value
            instance.text.return_value = []

            result = await search_grounding("xyznonexistentquery12345")

            assert not result.ok
            assert result.value == ""
            assert "no results" in result.reason

    @pytest.mark.asyncio
    async def test_max_results_clamped_high(self):
        """Test that max_results is clamped to 10."""
        with patch("aetheria.tools.web_search.DDGS") as mock_ddgs:
            instance = mock_ddgs.return_value.__enter__.return_value
            instance.text.return_value = []

            await search_grounding("test", max_results=100)

            instance.text.assert_called_once_with("test", max_results=10)

    @pytest.mark.asyncio
    async def test_max_results_clamped_low(self):
        """Test that max_results minimum is 1."""
        with patch("aetheria.tools.web_search.DDGS") as mock_ddgs:
            instance = mock_ddgs.return_value.__enter__.return_value
            instance.text.return_value = []

            await search_grounding("test", max_results=0)

            instance.text.assert_called_once_with("test", max_results=1)

    @pytest.mark.asyncio
    async def test_search_error_never_raises(self):
        """Test that search errors become failed results."""
        with patch("aetheria.tools.web_search.DDGS") as mock_ddgs:
            instance = mock_ddgs.return_value.__enter__.return_value
            instance.text.side_effect = RuntimeError("Ratelimit")

            result = await search_grounding("test")

            assert not result.ok
            assert result.reason == "Ratelimit"

    @pytest.mark.asyncio
    async def test_empty_query(self):
        """Test that a blank query is not searched."""
        with patch("aetheria.tools.web_search.DDGS") as mock_ddgs:
            result = await search_grounding("   ")

            assert not result.ok
            mock_ddgs.assert_not_called()


def test_format_results_defaults():
    output = format_results("q", [{}])

    assert output.startswith("Search results for 'q':")
    assert "1. No title" in output
    assert "No description" in output
