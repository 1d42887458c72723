"""
API схемы утверждения политик.
"""

from pydantic import BaseModel

from .policy_schemas import PolicyResponse


class SubmitForApprovalResponse(BaseModel):
    policy: PolicyResponse
    workflow_instance_id: str
