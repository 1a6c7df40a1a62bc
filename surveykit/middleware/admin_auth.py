"""Bearer token verification for the admin area.

User authentication itself is handled outside this service; the admin
endpoints only require the shared token the deployment is configured with.
"""

import hmac

from fastapi import HTTPException, Request

from surveykit.config import get_settings
from surveykit.logging_config import get_logger

logger = get_logger(__name__)


def token_matches(presented: str, expected: str) -> bool:
    """Constant-time comparison of two tokens."""
    return hmac.compare_digest(presented.encode("utf-8"), expected.encode("utf-8"))


async def verify_admin_token(request: Request) -> None:
    """FastAPI dependency guarding admin routes.

    Raises:
        HTTPException(401): If the Authorization header is missing or malformed
        HTTPException(403): If the token does not match

    Usage:
        router = APIRouter(dependencies=[Depends(verify_admin_token)])
    """
    client_ip = request.client.host if request.client else "unknown"
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")

    if scheme.lower() != "bearer" or not token:
        logger.warning(
            f"Missing admin token from IP: {client_ip}",
            extra={"client_ip": client_ip}
        )
        raise HTTPException(
            status_code=401,
            detail="Missing admin token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not token_matches(token.strip(), get_settings().admin_api_token):
        logger.warning(
            f"Invalid admin token from IP: {client_ip}",
            extra={"client_ip": client_ip}
        )
        raise HTTPException(status_code=403, detail="Invalid admin token")
