from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
import structlog

from delivery_api.services.auth_service import verify_access_token

logger = structlog.get_logger()

security = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> dict:
    """FastAPI dependency: verify the bearer JWT and return the actor dict.

    ``id`` is the raw token id; ``user_id`` falls back to it when the
    token predates the explicit claim.
    """
    token = credentials.credentials
    try:
        payload = verify_access_token(token)
        return {
            "id": payload["id"],
            "user_id": payload.get("user_id") or payload["id"],
            "role": str(payload["user_type"]).upper(),
            "company_id": payload.get("company_id"),
            "full_name": payload.get("full_name") or payload.get("username"),
        }
    except JWTError as e:
        logger.warning("auth_token_invalid", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": {
                    "code": "AUTH_TOKEN_INVALID",
                    "message": "Invalid or expired token",
                }
            },
            headers={"WWW-Authenticate": "Bearer"},
        )
