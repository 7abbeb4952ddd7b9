"""
Authentication utilities for JWT validation

Tokens are verified locally when SUPABASE_JWT_SECRET is set; otherwise the
token is checked against Supabase Auth.
"""
import logging
import os
from typing import Optional

from fastapi import HTTPException, Header
from jose import JWTError, jwt
from dotenv import load_dotenv

from .supabase_client import get_supabase_client

load_dotenv()

logger = logging.getLogger("backend.auth")

JWT_ALGORITHM = "HS256"
JWT_AUDIENCE = "authenticated"


def _jwt_secret() -> Optional[str]:
    return os.getenv("SUPABASE_JWT_SECRET")


def _user_info(user_id: str, email: Optional[str], metadata: dict, app_metadata: dict) -> dict:
    # Parent-child links live in app_metadata only; users cannot edit it
    return {
        "id": user_id,
        "email": email,
        "role": app_metadata.get("role") or metadata.get("role", "child"),
        "children": list(app_metadata.get("children") or []),
    }


def _user_from_claims(claims: dict) -> dict:
    return _user_info(
        claims["sub"],
        claims.get("email"),
        claims.get("user_metadata") or {},
        claims.get("app_metadata") or {},
    )


def _verify_locally(token: str, secret: str) -> dict:
    try:
        claims = jwt.decode(token, secret, algorithms=[JWT_ALGORITHM], audience=JWT_AUDIENCE)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    if not claims.get("sub"):
        raise HTTPException(status_code=401, detail="Token has no subject")
    return _user_from_claims(claims)


def _verify_with_supabase(token: str) -> dict:
    supabase = get_supabase_client()
    user_response = supabase.auth.get_user(token)

    if not user_response or not user_response.user:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    user = user_response.user
    return _user_info(user.id, user.email, user.user_metadata or {}, user.app_metadata or {})


async def get_current_user(authorization: Optional[str] = Header(None)):
    """
    Validate the bearer token and return user info

    Args:
        authorization: Bearer token from Authorization header

    Returns:
        dict: User information including id, email, role ("child" or "parent")
            and children (ids of linked children, for parents)

    Raises:
        HTTPException: If token is missing or invalid
    """
    if not authorization:
        raise HTTPException(status_code=401, detail="Authorization header required")

    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid authorization header format")

    token = authorization[len("Bearer "):]
    secret = _jwt_secret()

    if secret:
        return _verify_locally(token, secret)

    try:
        return _verify_with_supabase(token)
    except HTTPException:
        raise
    except Exception as e:
        logger.warning(f"Auth error: {e}")
        raise HTTPException(status_code=401, detail="Could not validate credentials")


def require_parent(user: dict):
    """
    Check that the user has the parent role

    Raises:
        HTTPException: If user is not a parent
    """
    if user.get("role") != "parent":
        raise HTTPException(status_code=403, detail="Parent access required")


def require_parent_of(user: dict, child_id: str):
    """
    Check that the user is a parent linked to the given child

    Raises:
        HTTPException: If user is not a parent, or not this child's parent
    """
    require_parent(user)
    if child_id not in user.get("children", []):
        logger.warning(f"Parent {user['id']} denied access to child {child_id}")
        raise HTTPException(status_code=403, detail="Not a parent of this child")
