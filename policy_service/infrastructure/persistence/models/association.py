"""
SQLAlchemy model for links between policies and investigation cases.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy import String, Text, DateTime, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, generate_uuid, utc_now


class PolicyCaseAssociationModel(Base):
    """
    Link from a policy (optionally pinned to a version) to a case.

    case_id is an opaque reference inside the organization; at most one
    link per (policy_id, case_id).
    """
    __tablename__ = "policy_case_associations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    organization_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    policy_id: Mapped[str] = mapped_column(String(36), nullable=False)
    policy_version_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    case_id: Mapped[str] = mapped_column(String(36), nullable=False)

    link_type: Mapped[str] = mapped_column(String(20), nullable=False)
    link_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    violation_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_by_id: Mapped[str] = mapped_column(String(36), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)

    __table_args__ = (
        UniqueConstraint("policy_id", "case_id", name="uq_policy_case_associations_policy_case"),
        Index("idx_policy_case_associations_org_policy", "organization_id", "policy_id"),
        Index("idx_policy_case_associations_org_case", "organization_id", "case_id"),
        Index("idx_policy_case_associations_org_link_type", "organization_id", "link_type"),
    )

    def __repr__(self) -> str:
        return (
            f"<PolicyCaseAssociationModel(policy='{self.policy_id}', "
            f"case='{self.case_id}', link_type='{self.link_type}')>"
        )
