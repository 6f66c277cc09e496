"""Call context variables for stamping logs with the call being processed."""

from contextvars import ContextVar
from typing import Optional

call_id_var: ContextVar[Optional[str]] = ContextVar("call_id", default=None)
tenant_id_var: ContextVar[Optional[str]] = ContextVar("tenant_id", default=None)


def set_call_context(call_id: str | None, tenant_id: str | None = None) -> None:
    """Set the current call context.

    Args:
        call_id: Runtime call id for the webhook being processed
        tenant_id: Client id the call belongs to, when already resolved
    """
    call_id_var.set(call_id)
    if tenant_id is not None:
        tenant_id_var.set(tenant_id)


def set_tenant_context(tenant_id: str | None) -> None:
    """Set the tenant for the current call once it has been resolved."""
    tenant_id_var.set(tenant_id)


def get_call_context() -> str | None:
    """Get the current call id."""
    return call_id_var.get()


def get_tenant_context() -> str | None:
    """Get the current tenant id."""
    return tenant_id_var.get()


def clear_call_context() -> None:
    """Clear the current call context."""
    call_id_var.set(None)
    tenant_id_var.set(None)
