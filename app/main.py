import logging
from contextlib import asynccontextmanager
from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from menu_costing.config import log_level
from menu_costing.core.errors import DuplicateEntityError, InvalidFieldError, UnknownEntityError
from menu_costing.db.database import init_db
from app.dependencies import verify_session_token, is_public, SESSION_COOKIE
from app.routers import auth, costing, edits, day, outlets

logging.basicConfig(level=log_level(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(lifespan=lifespan)


@app.middleware("http")
async def auth_middleware(request: Request, call_next):
    if not is_public(request.url.path):
        token = request.cookies.get(SESSION_COOKIE)
        if not token or not verify_session_token(token):
            return JSONResponse({"detail": "Not authenticated"}, status_code=401)
    return await call_next(request)


@app.exception_handler(UnknownEntityError)
async def unknown_entity_handler(request: Request, exc: UnknownEntityError):
    return JSONResponse({"detail": str(exc)}, status_code=404)


@app.exception_handler(DuplicateEntityError)
async def duplicate_entity_handler(request: Request, exc: DuplicateEntityError):
    return JSONResponse({"detail": str(exc)}, status_code=409)


@app.exception_handler(InvalidFieldError)
async def invalid_field_handler(request: Request, exc: InvalidFieldError):
    return JSONResponse({"detail": str(exc)}, status_code=422)


app.include_router(auth.router)
app.include_router(costing.router)
app.include_router(edits.router)
app.include_router(day.router)
app.include_router(outlets.router)
