"""
Policy version translation events.
"""
from typing import Any, Optional

from .base_event import BaseEvent
from .event_types import EventType, EventCategory


class TranslationCreatedEvent(BaseEvent):
    """Event when a translation of a policy version is created"""

    def __init__(
        self,
        organization_id: str,
        translation_id: str,
        actor_user_id: Optional[str],
        policy_version_id: str,
        language_code: str,
        translated_by: str,
        **kwargs: Any,
    ):
        super().__init__(
            event_type=EventType.TRANSLATION_CREATED,
            event_category=EventCategory.TRANSLATION,
            organization_id=organization_id,
            aggregate_id=translation_id,
            actor_user_id=actor_user_id,
            data={
                "policy_version_id": policy_version_id,
                "language_code": language_code,
                "translated_by": translated_by,
            },
            source="policy_translation_service",
            **kwargs,
        )


class TranslationUpdatedEvent(BaseEvent):
    """Event when translation content is edited by a person"""

    def __init__(
        self,
        organization_id: str,
        translation_id: str,
        actor_user_id: Optional[str],
        policy_version_id: str,
        language_code: str,
        was_stale: bool,
        **kwargs: Any,
    ):
        super().__init__(
            event_type=EventType.TRANSLATION_UPDATED,
            event_category=EventCategory.TRANSLATION,
            organization_id=organization_id,
            aggregate_id=translation_id,
            actor_user_id=actor_user_id,
            data={
                "policy_version_id": policy_version_id,
                "language_code": language_code,
                "was_stale": was_stale,
            },
            source="policy_translation_service",
            **kwargs,
        )


class TranslationReviewedEvent(BaseEvent):
    """Event when a reviewer changes the review status of a translation"""

    def __init__(
        self,
        organization_id: str,
        translation_id: str,
        actor_user_id: Optional[str],
        policy_version_id: str,
        language_code: str,
        review_status: str,
        **kwargs: Any,
    ):
        super().__init__(
            event_type=EventType.TRANSLATION_REVIEWED,
            event_category=EventCategory.TRANSLATION,
            organization_id=organization_id,
            aggregate_id=translation_id,
            actor_user_id=actor_user_id,
            data={
                "policy_version_id": policy_version_id,
                "language_code": language_code,
                "review_status": review_status,
            },
            source="policy_translation_service",
            **kwargs,
        )


class TranslationRefreshedEvent(BaseEvent):
    """Event when a stale translation is regenerated"""

    def __init__(
        self,
        organization_id: str,
        translation_id: str,
        actor_user_id: Optional[str],
        policy_version_id: str,
        language_code: str,
        **kwargs: Any,
    ):
        super().__init__(
            event_type=EventType.TRANSLATION_REFRESHED,
            event_category=EventCategory.TRANSLATION,
            organization_id=organization_id,
            aggregate_id=translation_id,
            actor_user_id=actor_user_id,
            data={
                "policy_version_id": policy_version_id,
                "language_code": language_code,
            },
            source="policy_translation_service",
            **kwargs,
        )


class TranslationsMarkedStaleEvent(BaseEvent):
    """Event when translations of a superseded version are flagged stale"""

    def __init__(
        self,
        organization_id: str,
        policy_id: str,
        previous_version_id: str,
        count: int,
        **kwargs: Any,
    ):
        super().__init__(
            event_type=EventType.TRANSLATIONS_MARKED_STALE,
            event_category=EventCategory.TRANSLATION,
            organization_id=organization_id,
            aggregate_id=policy_id,
            data={
                "policy_id": policy_id,
                "previous_version_id": previous_version_id,
                "count": count,
            },
            source="translation_staleness_listener",
            **kwargs,
        )
