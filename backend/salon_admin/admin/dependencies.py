"""
Admin Dependencies - AccessGate enforcement at the HTTP boundary.

Every admin endpoint declares its requirement with ``require_access``. The
dependency resolves the signed-in principal, evaluates the gate and answers
403 with the unmet requirement when access is denied.
"""
from __future__ import annotations

import logging
from typing import Callable

from fastapi import Depends, HTTPException, Request, status

from ..auth.access_gate import AccessDenied, AccessGate, AccessRequirement, ShowAccessDenied
from ..auth.principal import Principal
from ..dependencies import get_current_principal
from ..errors import PermissionError, error_payload
from .services.audit_service import AuditService

logger = logging.getLogger("salon_admin.rbac")

_API_DENIAL = ShowAccessDenied(message=PermissionError.message)


def require_access(requirement: AccessRequirement) -> Callable:
    """
    Build a dependency enforcing ``requirement`` for the current principal.

    Returns:
        Dependency returning the principal when access is granted

    Raises:
        HTTPException: 403 with the unmet requirement when access is denied
    """
    gate = AccessGate(requirement, _API_DENIAL)

    async def dependency(
        request: Request,
        principal: Principal = Depends(get_current_principal),
    ) -> Principal:
        decision = gate.evaluate(principal)
        if decision.allowed:
            return principal

        denied: AccessDenied = gate.render_fallback(decision)
        logger.warning(
            "Permission denied principal=%s role=%s required=%s method=%s path=%s",
            principal.id,
            getattr(principal.role, "value", principal.role),
            decision.unmet,
            request.method,
            request.url.path,
        )
        await AuditService().log_permission_denied(
            actor_id=principal.id,
            required=decision.unmet,
            method=request.method,
            path=request.url.path,
        )

        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=error_payload(
                PermissionError.code,
                denied.message,
                {
                    "title": denied.title,
                    "required": denied.required_permission,
                    "required_label": denied.formatted_permission,
                },
            ),
        )

    return dependency
