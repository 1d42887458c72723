"""
SQLAlchemy models for the built-in workflow engine.

Contains:
- WorkflowTemplateModel: stage graph per organization and entity type
- WorkflowInstanceModel: running workflow for one entity
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import String, Text, DateTime, Integer, Boolean, Index
from sqlalchemy.types import JSON
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, generate_uuid, utc_now


class WorkflowTemplateModel(Base):
    """
    Workflow template.

    stages: [{"id", "name", "description"}]
    transitions: [{"from", "to"}], "from" may be "*"
    """
    __tablename__ = "workflow_templates"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    organization_id: Mapped[str] = mapped_column(String(36), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    stages: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    transitions: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    initial_stage: Mapped[str] = mapped_column(String(100), nullable=False)
    default_sla_days: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        Index("idx_workflow_templates_org_entity", "organization_id", "entity_type", "is_active"),
    )


class WorkflowInstanceModel(Base):
    """
    Running workflow for a single entity.

    step_states: {stage_id: {"status", "completedAt", "completedBy"}}
    """
    __tablename__ = "workflow_instances"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    organization_id: Mapped[str] = mapped_column(String(36), nullable=False)
    template_id: Mapped[str] = mapped_column(String(36), nullable=False)
    template_version: Mapped[int] = mapped_column(Integer, nullable=False)
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_id: Mapped[str] = mapped_column(String(36), nullable=False)
    current_stage: Mapped[str] = mapped_column(String(100), nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="ACTIVE")
    step_states: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    outcome: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    started_by_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        Index("idx_workflow_instances_entity", "organization_id", "entity_type", "entity_id"),
        Index("idx_workflow_instances_status", "status"),
    )
