from typing import Optional

from fastapi import Header, HTTPException

from crmgen.core.config import settings


def current_user_id(x_user_id: Optional[str] = Header(None)) -> Optional[str]:
    """Caller identity recorded in created_by/updated_by. Token verification happens upstream."""
    if settings.auth_required and not x_user_id:
        raise HTTPException(status_code=401, detail="Authentication required")
    return x_user_id
