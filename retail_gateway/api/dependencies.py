"""Dependency injection for FastAPI endpoints"""

from typing import Optional
from fastapi import Header, Request
from retail_gateway.domain.exceptions import AuthorizationError
from retail_gateway.domain.models import AuthContext


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_auth_context(
    x_user_id: Optional[str] = Header(default=None),
    x_company_id: Optional[str] = Header(default=None),
    x_branch_id: Optional[str] = Header(default=None),
) -> AuthContext:
    """
    Build the caller's principal from trusted gateway headers.

    Both the user and the company identifier are mandatory; every query
    downstream is filtered by the company identifier returned here.
    """
    if not x_user_id or not x_user_id.strip():
        raise AuthorizationError("Missing X-User-Id header")
    if not x_company_id or not x_company_id.strip():
        raise AuthorizationError("Missing X-Company-Id header")

    return AuthContext(
        user_id=x_user_id.strip(),
        company_id=x_company_id.strip(),
        branch_id=x_branch_id.strip() if x_branch_id else None,
    )
