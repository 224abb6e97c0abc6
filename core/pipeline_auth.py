"""
Pipeline authentication using Bearer token.

Protects the pipeline trigger endpoints used by cron jobs and scheduled tasks.
"""

import secrets

from fastapi import HTTPException, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from core.settings import settings

security = HTTPBearer()


def verify_pipeline_token(
    credentials: HTTPAuthorizationCredentials = Security(security),
) -> str:
    """
    Verify the bearer token matches our pipeline secret.

    Raises:
        HTTPException: If token is missing or invalid
    """
    if settings.pipeline_api_token is None:
        raise HTTPException(
            status_code=500,
            detail="Server misconfigured: PIPELINE_API_TOKEN not set",
        )

    expected = settings.pipeline_api_token.get_secret_value()
    if not secrets.compare_digest(credentials.credentials, expected):
        raise HTTPException(
            status_code=401,
            detail="Invalid pipeline authentication token",
        )

    return credentials.credentials
