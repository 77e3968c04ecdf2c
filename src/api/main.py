import logging
import os
import time

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from api import state
from api.metrics import REQUESTS_TOTAL, REQUEST_LATENCY_SECONDS
from api.routers import chat, ops, planner, tasks, templates, users
from mailcraft.errors import MailcraftError
from mailcraft.models import User
from storage import db

# Logging configuration
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

DEMO_USER_ID = os.getenv("DEMO_USER_ID", "").strip()
DEMO_USER_CREDITS = int(os.getenv("DEMO_USER_CREDITS", "3"))

app = FastAPI(title="Mailcraft AI")

app.include_router(ops.router)
app.include_router(users.router)
app.include_router(chat.router)
app.include_router(planner.router)
app.include_router(tasks.router)
app.include_router(templates.router)


@app.exception_handler(MailcraftError)
async def handle_mailcraft_error(request: Request, exc: MailcraftError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.middleware("http")
async def record_request_metrics(request: Request, call_next):
    start = time.time()
    response = await call_next(request)

    route = request.scope.get("route")
    endpoint = getattr(route, "path", "unmatched")
    REQUESTS_TOTAL.labels(endpoint=endpoint, status=str(response.status_code)).inc()
    REQUEST_LATENCY_SECONDS.labels(endpoint=endpoint).observe(time.time() - start)
    return response


@app.on_event("startup")
async def startup() -> None:
    if state.USE_DATABASE:
        await db.init_db_pool()
        await db.init_schema()
        state.use_postgres_stores()

    if DEMO_USER_ID and await state.user_store.get(DEMO_USER_ID) is None:
        await state.user_store.upsert(User(id=DEMO_USER_ID, credits=DEMO_USER_CREDITS))
        logger.info(f"Seeded demo user {DEMO_USER_ID} with {DEMO_USER_CREDITS} credits")


@app.on_event("shutdown")
async def shutdown() -> None:
    if state.USE_DATABASE:
        await db.close_db_pool()
