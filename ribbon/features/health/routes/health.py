from fastapi import APIRouter, Depends, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ribbon.platform.db.session import get_db
from ribbon.platform.logger import get_logger
from ribbon.platform.response import api_response

logger = get_logger(__name__)

router = APIRouter()


@router.get("/health", tags=["health"])
async def health_check(db: AsyncSession = Depends(get_db)):
    try:
        await db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as exc:
        logger.error(f"Health check could not reach the database: {exc}")
        database = "unavailable"

    healthy = database == "ok"
    return api_response(
        data={"status": "ok" if healthy else "degraded", "service": "Ribbon", "database": database},
        message="Service is healthy" if healthy else "Service is degraded",
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
    )
