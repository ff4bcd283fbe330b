from fastapi import APIRouter, HTTPException
from sqlmodel import Session, select

from config import logger

router = APIRouter(tags=["Health"])

def get_database_engine():
    """Get the database engine from the main app context"""
    from fastapi_app import database_engine
    return database_engine

@router.get("/health",
         summary="Health check",
         description="Checks the goal store connection and returns the application's health status.")
def health_check():
    try:
        with Session(get_database_engine()) as session:
            session.exec(select(1))
        return {"status": "healthy"}
    except Exception as e:
        logger.error(f"[health] goal store unreachable: {e}")
        raise HTTPException(status_code=503, detail="Database connection failed")
