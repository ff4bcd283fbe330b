# Standard library imports
from contextlib import asynccontextmanager

# Third-party imports
from fastapi import FastAPI
from sqlmodel import create_engine
import uvicorn

# Local application imports
from config import settings, logger
from models import create_db_and_tables
from routers import auth, users, goals, entries, dashboard, memos, health

database_engine = None


def make_engine(database_url: str):
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_engine(database_url, connect_args=connect_args)


@asynccontextmanager
async def lifespan(_: FastAPI):
    """
    Manage application lifespan events.
    Connects to the goal store on startup and disposes the engine on exit.
    """
    # Startup
    global database_engine
    owns_engine = database_engine is None
    if owns_engine:
        database_engine = make_engine(settings.DATABASE_URL)
    create_db_and_tables(database_engine)
    logger.info("Application started with connection to the database")

    yield

    # Shutdown
    if owns_engine:
        logger.info("Shutting down, closing connection to database")
        database_engine.dispose()
        database_engine = None

app = FastAPI(lifespan=lifespan)
app.title = "Goal Cockpit - Backend"
app.version = "0.1.0"

# Include routers
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(goals.router)
app.include_router(entries.router)
app.include_router(dashboard.router)
app.include_router(memos.router)
app.include_router(health.router)


@app.get("/",
         tags=["Root"],
         summary="Welcome Endpoint",
         description="Returns a welcome message including the application title and version.")
def root():
    return {"message": f"Welcome to {app.title} v{app.version}"}


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
