"""
StackIt Backend — Tag Rule Unit Tests
=======================================

What we test:
    ✅ add_tag strips, ignores blanks and duplicates, stops at MAX_TAGS
    ✅ add_tag never mutates its input
    ✅ normalize_tags / dedupe_tags over whole submissions
    ✅ suggestions skip held tags and disappear at the cap
    ✅ GET /api/tags/suggested
"""

import pytest

from stackit.services.tags import (
    MAX_TAGS,
    SUGGESTED_TAGS,
    add_tag,
    dedupe_tags,
    normalize_tags,
    suggestions_for,
)


class TestAddTag:

    def test_appends_stripped_tag(self):
        assert add_tag(["SQL"], "  React ") == ["SQL", "React"]

    def test_ignores_blank(self):
        assert add_tag(["SQL"], "   ") == ["SQL"]

    def test_ignores_duplicate(self):
        assert add_tag(["React", "CSS"], "React") == ["React", "CSS"]

    def test_duplicate_check_is_case_sensitive(self):
        assert add_tag(["react"], "React") == ["react", "React"]

    def test_ignores_sixth_tag(self):
        full = ["a", "b", "c", "d", "e"]
        assert add_tag(full, "f") == full

    def test_does_not_mutate_input(self):
        tags = ["SQL"]
        add_tag(tags, "CSS")
        assert tags == ["SQL"]


class TestNormalizeTags:

    def test_keeps_first_seen_order(self):
        assert normalize_tags(["CSS", " HTML", "CSS", "", "SQL"]) == ["CSS", "HTML", "SQL"]

    def test_drops_tags_past_cap(self):
        tags = [f"tag{i}" for i in range(8)]
        assert normalize_tags(tags) == tags[:MAX_TAGS]

    def test_dedupe_applies_no_cap(self):
        tags = [f"tag{i}" for i in range(8)] + ["tag0"]
        assert dedupe_tags(tags) == [f"tag{i}" for i in range(8)]


class TestSuggestions:

    def test_excludes_held_tags(self):
        suggestions = suggestions_for(["React", "SQL"])
        assert "React" not in suggestions
        assert "SQL" not in suggestions
        assert suggestions[0] == "JavaScript"

    def test_empty_at_cap(self):
        assert suggestions_for(["a", "b", "c", "d", "e"]) == []

    def test_full_list_when_nothing_selected(self):
        assert suggestions_for([]) == list(SUGGESTED_TAGS)


class TestSuggestedTagsEndpoint:

    @pytest.mark.asyncio
    async def test_returns_remaining_suggestions(self, test_client):
        response = await test_client.get(
            "/api/tags/suggested",
            params=[("selected", "React"), ("selected", "CSS")],
        )
        assert response.status_code == 200
        body = response.json()
        assert body["max_tags"] == MAX_TAGS
        assert "React" not in body["tags"]
        assert "CSS" not in body["tags"]
        assert "Python" in body["tags"]
