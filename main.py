from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from routers import api_router
from config import settings
from database import engine, Base
from services.errors import InvalidOrder, LedgerError
import models  # noqa: F401  ensure model registration
import os
import logging
from sqlalchemy import inspect

logger = logging.getLogger(__name__)

app = FastAPI(title=settings.PROJECT_NAME)
# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
# Only auto-create the schema for tests / SQLite / explicit dev flag; everywhere
# else the Alembic migrations own it.
if os.environ.get("TESTING") or engine.url.get_backend_name() == "sqlite" or os.environ.get("DEV_AUTO_CREATE") == "1":
    Base.metadata.create_all(bind=engine)
else:
    try:
        insp = inspect(engine)
        missing = {t for t in ("users", "holdings", "transactions") if t not in insp.get_table_names()}
        if missing:
            logger.warning(
                "Database schema missing tables %s. Run Alembic migrations: `alembic upgrade head`.",
                ", ".join(sorted(missing))
            )
    except Exception as e:
        logger.warning("Schema inspection failed: %s", e)


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    return JSONResponse(status_code=exc.status_code, content={"code": exc.code, "detail": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    # A malformed trade payload is an invalid order, not a generic 422
    if request.url.path.startswith(f"{settings.API_V1_STR}/portfolio/"):
        return JSONResponse(
            status_code=InvalidOrder.status_code,
            content={"code": InvalidOrder.code, "detail": jsonable_encoder(exc.errors())},
        )
    return JSONResponse(status_code=422, content={"detail": jsonable_encoder(exc.errors())})


# Include API routers
app.include_router(api_router, prefix=settings.API_V1_STR)

@app.get("/")
async def root():
    return {"message": "Paper Trading Ledger API"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
