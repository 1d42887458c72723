"""
SQLAlchemy model for translations pinned to a policy version.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy import String, Text, DateTime, Boolean, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, generate_uuid, utc_now


class PolicyVersionTranslationModel(Base):
    """
    Translation of one immutable policy version into one language.

    At most one row per (policy_version_id, language_code).
    """
    __tablename__ = "policy_version_translations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    organization_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    policy_version_id: Mapped[str] = mapped_column(String(36), nullable=False)
    language_code: Mapped[str] = mapped_column(String(10), nullable=False)
    language_name: Mapped[str] = mapped_column(String(100), nullable=False)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    plain_text: Mapped[str] = mapped_column(Text, nullable=False)

    translated_by: Mapped[str] = mapped_column(String(20), nullable=False)
    ai_model: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    review_status: Mapped[str] = mapped_column(String(50), nullable=False, default="PENDING_REVIEW")
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    reviewed_by_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    review_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    is_stale: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_by_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        UniqueConstraint("policy_version_id", "language_code", name="uq_translations_version_language"),
        Index("idx_translations_org_stale", "organization_id", "is_stale"),
    )

    def __repr__(self) -> str:
        return (
            f"<PolicyVersionTranslationModel(version='{self.policy_version_id}', "
            f"language='{self.language_code}', stale={self.is_stale})>"
        )
