from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.database import check_database, get_db

router = APIRouter(tags=["health"])


@router.get("/health")
def health(db: Session = Depends(get_db)):
    try:
        check_database(db)
        database = "healthy"
    except SQLAlchemyError as e:
        database = f"unhealthy: {type(e).__name__}"

    return {
        "status": "healthy" if database == "healthy" else "degraded",
        "database": database,
        "timestamp": datetime.now(timezone.utc),
    }
