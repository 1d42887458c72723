"""Audit Log model"""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import DateTime, String, Text, Index
from sqlalchemy.types import JSON
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, generate_uuid, utc_now


class AuditLogModel(Base):
    """Audit trail entry for policy, version and translation changes"""

    __tablename__ = "audit_logs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    organization_id: Mapped[str] = mapped_column(String(36), nullable=False)

    # Subject
    entity_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="POLICY, POLICY_VERSION_TRANSLATION, ...",
    )
    entity_id: Mapped[str] = mapped_column(String(36), nullable=False)

    # Action
    action: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        index=True,
        comment="created, updated, published, retired, submitted_for_approval, ...",
    )
    action_description: Mapped[str] = mapped_column(Text, nullable=False)

    # Actor
    actor_user_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    actor_type: Mapped[str] = mapped_column(String(20), nullable=False, default="USER")

    # Payload
    changes: Mapped[Optional[Dict[str, Any]]] = mapped_column(
        JSON,
        nullable=True,
        comment="{'old_value': {...}, 'new_value': {...}}",
    )
    context: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
        index=True,
    )

    __table_args__ = (
        Index("idx_audit_logs_entity", "organization_id", "entity_type", "entity_id"),
    )

    def __repr__(self) -> str:
        return f"<AuditLogModel(entity='{self.entity_type}:{self.entity_id}', action='{self.action}')>"
