from fastapi import Depends, HTTPException, status

from delivery_api.middleware.auth import get_current_user


def require_roles(*allowed_roles: str):
    """
    FastAPI dependency factory for role-based access control.

    Usage:
        @router.get("/api/deliveries")
        async def list_deliveries(
            current_user: dict = Depends(get_current_user),
            _auth: None = Depends(require_roles("ADMIN", "SUPERVISOR", "DRIVER")),
        ):
    """
    async def check_role(current_user: dict = Depends(get_current_user)):
        if current_user["role"] not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={
                    "error": {
                        "code": "INSUFFICIENT_PERMISSIONS",
                        "message": (
                            f"Role '{current_user['role']}' cannot perform this action. "
                            f"Required: {allowed_roles}"
                        ),
                    }
                },
            )
        if current_user.get("company_id") is None:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={
                    "error": {
                        "code": "COMPANY_SCOPE_REQUIRED",
                        "message": "Token carries no company scope",
                    }
                },
            )
        return None

    return check_role
