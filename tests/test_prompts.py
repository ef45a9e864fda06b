"""Tests for CatalogPrompts."""

import pytest

from copilot_catalog.catalog import InvalidArgumentError
from copilot_catalog.prompts import SEARCH_PROMPT_NAME, CatalogPrompts


class TestCatalogPrompts:
    """Test listing and rendering prompts."""
    
    def test_list_prompts(self):
        prompts = CatalogPrompts().list_prompts()
        
        assert [p["name"] for p in prompts] == [SEARCH_PROMPT_NAME]
        assert prompts[0]["arguments"][0] == {
            "name": "keyword",
            "description": "The keyword to search for",
            "required": True,
        }
    
    def test_get_prompt_embeds_keyword(self):
        rendered = CatalogPrompts().get_prompt(SEARCH_PROMPT_NAME, {"keyword": "terraform"})
        
        message = rendered["messages"][0]
        assert message["role"] == "user"
        assert message["content"]["type"] == "text"
        assert "`terraform`" in message["content"]["text"]
        assert 'query="terraform"' in message["content"]["text"]
    
    def test_prompt_text_is_dedented(self):
        text = CatalogPrompts().get_prompt(SEARCH_PROMPT_NAME, {"keyword": "x"})["messages"][0]["content"]["text"]
        
        assert text.startswith("Please search")
    
    def test_unknown_prompt(self):
        with pytest.raises(InvalidArgumentError, match="Unknown prompt"):
            CatalogPrompts().get_prompt("other", {"keyword": "x"})
    
    def test_missing_keyword(self):
        with pytest.raises(InvalidArgumentError, match="Missing keyword"):
            CatalogPrompts().get_prompt(SEARCH_PROMPT_NAME, {})
