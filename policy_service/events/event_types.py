"""
Event types and categories for the policy service event fan-out.
"""

from enum import Enum


class EventCategory(str, Enum):
    """Categories of events in the system."""

    POLICY = "policy"
    APPROVAL = "approval"
    TRANSLATION = "translation"
    WORKFLOW = "workflow"
    ASSOCIATION = "association"


class EventType(str, Enum):
    """Closed set of event kinds handled by the dispatcher."""

    # Policy lifecycle
    POLICY_CREATED = "policy.created"
    POLICY_UPDATED = "policy.updated"
    POLICY_PUBLISHED = "policy.published"
    POLICY_RETIRED = "policy.retired"
    POLICY_STATUS_CHANGED = "policy.status_changed"

    # Policy approval
    POLICY_SUBMITTED_FOR_APPROVAL = "policy.submitted_for_approval"
    POLICY_APPROVAL_CANCELLED = "policy.approval_cancelled"
    POLICY_APPROVED = "policy.approved"
    POLICY_REJECTED = "policy.rejected"
    POLICY_APPROVAL_STEP_COMPLETED = "policy.approval_step_completed"

    # Translations
    TRANSLATION_CREATED = "policy.translation.created"
    TRANSLATION_UPDATED = "policy.translation.updated"
    TRANSLATION_REVIEWED = "policy.translation.reviewed"
    TRANSLATION_REFRESHED = "policy.translation.refreshed"
    TRANSLATIONS_MARKED_STALE = "translations.marked_stale"

    # Policy-case links
    POLICY_LINKED_TO_CASE = "policy.linked_to_case"
    POLICY_UNLINKED_FROM_CASE = "policy.unlinked_from_case"

    # Workflow engine
    WORKFLOW_TRANSITIONED = "workflow.transitioned"
    WORKFLOW_COMPLETED = "workflow.completed"
    WORKFLOW_CANCELLED = "workflow.cancelled"
