import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.config import settings
from app.db import create_db_tables, engine
from app.goals.accounts_router import router as accounts_router
from app.goals.errors import GoalsError, PersistenceError, ValidationError
from app.goals.router import router as goals_router

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.create_tables:
        await create_db_tables(engine)
    yield
    await engine.dispose()


app = FastAPI(title="Goals", version="0.1.0", lifespan=lifespan)
app.include_router(goals_router)
app.include_router(accounts_router)


@app.exception_handler(GoalsError)
async def goals_error_handler(_: Request, exc: GoalsError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        problems.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    error = ValidationError("; ".join(problems) or "Invalid request")
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(SQLAlchemyError)
async def persistence_error_handler(_: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error: %s", exc)
    error = PersistenceError("Storage is unavailable, try again")
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.get("/")
async def root() -> dict:
    return {
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
        "api": {
            "goals": "/api/v1/goals",
            "goal": "/api/v1/goals/{id}",
            "goal_archive": "/api/v1/goals/{id}/archive",
            "goal_restore": "/api/v1/goals/{id}/restore",
            "goal_transfer": "/api/v1/goals/{id}/transfer",
            "accounts": "/api/v1/accounts",
            "account_history": "/api/v1/accounts/{id}/history",
        },
    }


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
