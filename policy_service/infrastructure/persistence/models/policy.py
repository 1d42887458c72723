"""
SQLAlchemy models for policies and their immutable versions.

Contains:
- PolicyModel: mutable policy head with the working draft
- PolicyVersionModel: append-only published snapshots
"""
from datetime import datetime
from typing import Optional

from sqlalchemy import String, Text, DateTime, Integer, Boolean, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, generate_uuid, utc_now


class PolicyModel(Base):
    """
    Policy head record.

    draft_content is the working copy; it is None when there are no
    unpublished edits. current_version stays 0 until the first publish.
    """
    __tablename__ = "policies"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    organization_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False)
    policy_type: Mapped[str] = mapped_column(String(50), nullable=False)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="DRAFT")
    current_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    draft_content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    draft_updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    draft_updated_by_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    owner_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    effective_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    review_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    retired_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_by_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        UniqueConstraint("organization_id", "slug", name="uq_policies_org_slug"),
        Index("idx_policies_org_status", "organization_id", "status"),
        Index("idx_policies_org_updated", "organization_id", "updated_at"),
    )

    def __repr__(self) -> str:
        return f"<PolicyModel(id='{self.id}', slug='{self.slug}', status='{self.status}')>"


class PolicyVersionModel(Base):
    """
    Immutable published version of a policy.

    Only is_latest flips to False when a newer version is published.
    """
    __tablename__ = "policy_versions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    organization_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    policy_id: Mapped[str] = mapped_column(String(36), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    version_label: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    content: Mapped[str] = mapped_column(Text, nullable=False)
    plain_text: Mapped[str] = mapped_column(Text, nullable=False)
    summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    change_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    is_latest: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    published_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
    published_by_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    effective_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)

    __table_args__ = (
        UniqueConstraint("policy_id", "version", name="uq_policy_versions_policy_version"),
        Index("idx_policy_versions_policy_latest", "policy_id", "is_latest"),
    )

    def __repr__(self) -> str:
        return (
            f"<PolicyVersionModel(policy_id='{self.policy_id}', version={self.version}, "
            f"is_latest={self.is_latest})>"
        )
