"""
Unit-тесты доменных сервисов и value objects политики.

Проверяют:
- Извлечение plain text из HTML
- Генерацию уникальных slug
- Таблицу переходов PolicyStatus
"""

import pytest

from policy_service.core.errors import SlugExhaustedError
from policy_service.domain.policy_context.services import (
    extract_plain_text,
    generate_unique_slug,
    has_content,
    slugify,
)
from policy_service.domain.policy_context.value_objects import (
    PolicyStatus,
    get_language_name,
    is_supported_language,
)


class TestExtractPlainText:
    """Тесты extract_plain_text."""

    def test_strips_tags_and_collapses_whitespace(self):
        assert extract_plain_text("<h1>Title</h1>\n<p>  first   line </p>") == "Title first line"

    def test_tags_become_word_boundaries(self):
        assert extract_plain_text("<p>one</p><p>two</p>") == "one two"

    def test_decodes_entities(self):
        html = "<p>A &amp; B &lt;tag&gt; &quot;q&quot; it&#39;s&nbsp;ok</p>"
        assert extract_plain_text(html) == "A & B <tag> \"q\" it's ok"

    def test_ampersand_decoded_before_angle_brackets(self):
        assert extract_plain_text("&amp;lt;") == "<"

    def test_empty_input(self):
        assert extract_plain_text("") == ""
        assert extract_plain_text("<p> </p>") == ""


class TestHasContent:

    @pytest.mark.parametrize("content", [None, "", "   ", "\n\t"])
    def test_blank_content(self, content):
        assert has_content(content) is False

    def test_non_blank_content(self):
        assert has_content("<p>x</p>") is True


class TestSlugGenerator:
    """Тесты генерации slug."""

    def test_slugify(self):
        assert slugify("Code of Conduct!") == "code-of-conduct"
        assert slugify("  Anti--Bribery & Corruption  ") == "anti-bribery-corruption"

    def test_slugify_falls_back_when_nothing_left(self):
        assert slugify("!!!") == "policy"
        assert slugify("Политика") == "policy"

    @pytest.mark.asyncio
    async def test_returns_base_slug_when_free(self):
        async def slug_exists(candidate):
            return False

        assert await generate_unique_slug("Travel Expense", slug_exists) == "travel-expense"

    @pytest.mark.asyncio
    async def test_appends_counter_on_collision(self):
        taken = {"travel-expense", "travel-expense-1"}
        checked = []

        async def slug_exists(candidate):
            checked.append(candidate)
            return candidate in taken

        assert await generate_unique_slug("Travel Expense", slug_exists) == "travel-expense-2"
        assert checked == ["travel-expense", "travel-expense-1", "travel-expense-2"]

    @pytest.mark.asyncio
    async def test_exhausted_after_max_attempts(self):
        async def slug_exists(candidate):
            return True

        with pytest.raises(SlugExhaustedError) as exc_info:
            await generate_unique_slug("Gifts", slug_exists, max_attempts=5)

        assert exc_info.value.message == "Unable to generate unique slug for policy"
        assert exc_info.value.details == {"base_slug": "gifts", "attempts": 5}


class TestPolicyStatus:
    """Тесты таблицы переходов."""

    def test_draft_transitions(self):
        assert PolicyStatus.DRAFT.can_transition_to(PolicyStatus.PENDING_APPROVAL)
        assert PolicyStatus.DRAFT.can_transition_to(PolicyStatus.PUBLISHED)
        assert not PolicyStatus.DRAFT.can_transition_to(PolicyStatus.APPROVED)

    def test_pending_approval_outcomes(self):
        assert PolicyStatus.PENDING_APPROVAL.can_transition_to(PolicyStatus.APPROVED)
        assert PolicyStatus.PENDING_APPROVAL.can_transition_to(PolicyStatus.DRAFT)

    def test_republish_allowed(self):
        assert PolicyStatus.PUBLISHED.can_transition_to(PolicyStatus.PUBLISHED)

    def test_retired_is_terminal(self):
        assert PolicyStatus.RETIRED.is_terminal()
        for status in PolicyStatus:
            assert not PolicyStatus.RETIRED.can_transition_to(status)

    def test_only_pending_approval_is_locked(self):
        assert not PolicyStatus.PENDING_APPROVAL.is_editable()
        assert PolicyStatus.DRAFT.is_editable()
        assert PolicyStatus.PUBLISHED.is_editable()


class TestLanguages:

    def test_known_language(self):
        assert is_supported_language("de")
        assert get_language_name("de") == "German"

    def test_unknown_language_falls_back_to_code(self):
        assert not is_supported_language("xx")
        assert get_language_name("xx") == "xx"
