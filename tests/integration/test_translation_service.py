"""
Integration-тесты PolicyTranslationService.

Проверяют:
- AI и ручное создание перевода
- Конфликт при повторном переводе на тот же язык
- Ошибку AI-навыка
- Смену происхождения AI -> HUMAN при правке
- Ревью и обновление устаревшего перевода
"""

import pytest

from conftest import ORG_ID, OTHER_ORG_ID, USER_ID, FakeTranslationSkill, publish_new_version
from policy_service.application.dto import (
    CreateTranslationInput,
    ReviewTranslationInput,
    UpdateTranslationInput,
)
from policy_service.application.services import PolicyTranslationService
from policy_service.core.errors import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    PreconditionFailedError,
    UpstreamFailureError,
)
from policy_service.domain.policy_context.value_objects import TranslationReviewStatus
from policy_service.events import EventType


def ai_input(version_id, language_code="de"):
    return CreateTranslationInput(policy_version_id=version_id, language_code=language_code)


class TestTranslate:

    @pytest.mark.asyncio
    async def test_ai_translation(self, translation_service, translation_skill, published_version, published_events):
        translation = await translation_service.translate(ai_input(published_version.id), USER_ID, ORG_ID)

        assert translation.translated_by == "AI"
        assert translation.ai_model == "fake-llm"
        assert translation.language_name == "German"
        assert translation.content == "[de] <p>Keep records for <b>7</b> years</p>"
        assert translation.title == "[de] Data Retention"
        assert translation.plain_text == "[de] Keep records for 7 years"
        assert translation.review_status == TranslationReviewStatus.PENDING_REVIEW.value
        assert translation.is_stale is False

        body_call, title_call = translation_skill.calls
        assert body_call["params"]["preserveFormatting"] is True
        assert title_call["params"]["preserveFormatting"] is False
        assert body_call["context"].entity_type == "POLICY_VERSION"
        assert body_call["context"].entity_id == published_version.id
        assert body_call["context"].permissions == ["ai:skills:translate"]

        assert published_events[-1].event_type == EventType.TRANSLATION_CREATED
        assert published_events[-1].data["translated_by"] == "AI"

    @pytest.mark.asyncio
    async def test_manual_translation(self, translation_service, translation_skill, published_version):
        translation = await translation_service.translate(
            CreateTranslationInput(
                policy_version_id=published_version.id,
                language_code="fr",
                use_ai=False,
                content="<p>Conserver sept ans</p>",
                title="Conservation",
            ),
            USER_ID,
            ORG_ID,
        )

        assert translation.translated_by == "HUMAN"
        assert translation.ai_model is None
        assert translation.plain_text == "Conserver sept ans"
        assert translation_skill.calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "content,title,message",
        [
            (None, "Titre", "Content is required"),
            ("<p>x</p>", None, "Title is required"),
        ],
    )
    async def test_manual_translation_requires_content_and_title(
        self, translation_service, published_version, content, title, message
    ):
        with pytest.raises(PreconditionFailedError) as exc_info:
            await translation_service.translate(
                CreateTranslationInput(
                    policy_version_id=published_version.id,
                    language_code="fr",
                    use_ai=False,
                    content=content,
                    title=title,
                ),
                USER_ID,
                ORG_ID,
            )

        assert message in exc_info.value.message

    @pytest.mark.asyncio
    async def test_duplicate_language_conflicts(self, translation_service, published_version):
        await translation_service.translate(ai_input(published_version.id), USER_ID, ORG_ID)

        with pytest.raises(ConflictError) as exc_info:
            await translation_service.translate(
                CreateTranslationInput(
                    policy_version_id=published_version.id,
                    language_code="de",
                    use_ai=False,
                    content="<p>x</p>",
                    title="x",
                ),
                USER_ID,
                ORG_ID,
            )

        assert "Use update instead" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_unknown_version(self, translation_service):
        with pytest.raises(NotFoundError):
            await translation_service.translate(ai_input("missing"), USER_ID, ORG_ID)

    @pytest.mark.asyncio
    async def test_version_of_other_organization(self, translation_service, published_version):
        with pytest.raises(NotFoundError):
            await translation_service.translate(ai_input(published_version.id), USER_ID, OTHER_ORG_ID)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("fail_on,prefix", [(1, "AI translation failed"), (2, "AI title translation failed")])
    async def test_upstream_failure(
        self, session_factory, event_bus, container, published_version, fail_on, prefix
    ):
        service = PolicyTranslationService(
            session_factory,
            FakeTranslationSkill(fail_on=fail_on, error="rate limited"),
            event_bus,
            container.audit_service,
        )

        with pytest.raises(UpstreamFailureError) as exc_info:
            await service.translate(ai_input(published_version.id), USER_ID, ORG_ID)

        assert exc_info.value.message.startswith(prefix)
        assert exc_info.value.message.endswith("rate limited")
        assert await service.list_by_version(published_version.id, ORG_ID) == []

    @pytest.mark.asyncio
    async def test_upstream_failure_without_message(self, session_factory, event_bus, container, published_version):
        service = PolicyTranslationService(
            session_factory, FakeTranslationSkill(fail_on=1, error=None), event_bus, container.audit_service
        )

        with pytest.raises(UpstreamFailureError) as exc_info:
            await service.translate(ai_input(published_version.id), USER_ID, ORG_ID)

        assert exc_info.value.message.endswith("Unknown error")


class TestUpdateAndReview:

    @pytest.mark.asyncio
    async def test_human_edit_flips_origin_and_clears_stale(
        self, translation_service, policy_service, draft_policy, published_version
    ):
        translation = await translation_service.translate(ai_input(published_version.id), USER_ID, ORG_ID)
        await publish_new_version(policy_service, draft_policy.id, "<p>Keep records for 10 years</p>")
        assert (await translation_service.get(translation.id, ORG_ID)).is_stale is True

        updated = await translation_service.update_translation(
            translation.id,
            UpdateTranslationInput(content="<p>Zehn Jahre</p>", notes="Fixed terminology"),
            "translator-1",
            ORG_ID,
        )

        assert updated.translated_by == "HUMAN"
        assert updated.is_stale is False
        assert updated.title == "[de] Data Retention"
        assert updated.plain_text == "Zehn Jahre"
        assert updated.review_notes == "Fixed terminology"

    @pytest.mark.asyncio
    async def test_review(self, translation_service, published_version, published_events):
        translation = await translation_service.translate(ai_input(published_version.id), USER_ID, ORG_ID)

        reviewed = await translation_service.review_translation(
            translation.id,
            ReviewTranslationInput(status=TranslationReviewStatus.APPROVED, notes="Looks good"),
            "reviewer-1",
            ORG_ID,
        )

        assert reviewed.review_status == "APPROVED"
        assert reviewed.reviewed_by_id == "reviewer-1"
        assert reviewed.reviewed_at is not None
        assert reviewed.review_notes == "Looks good"
        assert reviewed.content == translation.content
        assert published_events[-1].event_type == EventType.TRANSLATION_REVIEWED

    @pytest.mark.asyncio
    async def test_translation_activity_is_recorded_on_policy(
        self, translation_service, policy_service, draft_policy, published_version
    ):
        translation = await translation_service.translate(ai_input(published_version.id), USER_ID, ORG_ID)

        activity = await policy_service.get_activity(draft_policy.id, ORG_ID)

        entry = activity[0]
        assert entry.action == "translation_created"
        assert entry.action_description == 'Created German translation for policy "Data Retention" (AI-generated)'
        assert entry.context["translation_id"] == translation.id


class TestRefreshStale:

    @pytest.mark.asyncio
    async def test_refresh_requires_stale(self, translation_service, published_version):
        translation = await translation_service.translate(ai_input(published_version.id), USER_ID, ORG_ID)

        with pytest.raises(InvalidStateError) as exc_info:
            await translation_service.refresh_stale_translation(translation.id, USER_ID, ORG_ID)

        assert translation.id in exc_info.value.message

    @pytest.mark.asyncio
    async def test_refresh_retranslates_and_resets_review(
        self, translation_service, policy_service, draft_policy, published_version
    ):
        translation = await translation_service.translate(ai_input(published_version.id), USER_ID, ORG_ID)
        await translation_service.review_translation(
            translation.id, ReviewTranslationInput(status=TranslationReviewStatus.APPROVED), "reviewer-1", ORG_ID
        )
        await publish_new_version(policy_service, draft_policy.id, "<p>New rules</p>")

        refreshed = await translation_service.refresh_stale_translation(translation.id, USER_ID, ORG_ID)

        assert refreshed.is_stale is False
        assert refreshed.translated_by == "AI"
        assert refreshed.review_status == TranslationReviewStatus.PENDING_REVIEW.value
        assert refreshed.reviewed_at is None
        assert refreshed.reviewed_by_id is None
        assert refreshed.review_notes is None
        # Версия перевода не меняется: переводится ее собственный контент
        assert refreshed.policy_version_id == published_version.id
        assert refreshed.content == "[de] <p>Keep records for <b>7</b> years</p>"


class TestQueries:

    @pytest.mark.asyncio
    async def test_list_by_version_sorted_by_language(self, translation_service, published_version):
        for code in ("fr", "de", "es"):
            await translation_service.translate(ai_input(published_version.id, code), USER_ID, ORG_ID)

        translations = await translation_service.list_by_version(published_version.id, ORG_ID)

        assert [t.language_code for t in translations] == ["de", "es", "fr"]

    @pytest.mark.asyncio
    async def test_list_stale(self, translation_service, policy_service, draft_policy, published_version):
        await translation_service.translate(ai_input(published_version.id), USER_ID, ORG_ID)
        assert await translation_service.list_stale(ORG_ID) == []

        await publish_new_version(policy_service, draft_policy.id, "<p>v2</p>")

        stale = await translation_service.list_stale(ORG_ID)
        assert [t.language_code for t in stale] == ["de"]

    def test_available_languages(self):
        languages = PolicyTranslationService.available_languages()

        assert languages["en"] == "English"
        assert languages["zh-TW"]
