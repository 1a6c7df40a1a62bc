"""Health check endpoint for monitoring and deployment verification."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from surveykit.config import get_settings
from surveykit.models.database import get_db
from surveykit.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()


def database_reachable(db: Session) -> bool:
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Health check failed: {e}")
        return False
    return True


@router.get("/health")
def health_check(db: Session = Depends(get_db)) -> dict:
    """Report whether the service can reach its document store.

    Raises:
        HTTPException: 503 when the database cannot be reached

    Example response:
        {"status": "healthy", "database": "connected", "environment": "production"}
    """
    if not database_reachable(db):
        raise HTTPException(
            status_code=503,
            detail="Service unavailable - database connection failed"
        )

    return {
        "status": "healthy",
        "database": "connected",
        "environment": get_settings().environment,
    }
