from .engine import WorkflowEngine

__all__ = ["WorkflowEngine"]
