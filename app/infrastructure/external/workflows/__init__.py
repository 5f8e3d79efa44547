"""External workflow runners."""

from app.infrastructure.external.workflows.n8n_invoker import N8nWorkflowInvoker

__all__ = ["N8nWorkflowInvoker"]
