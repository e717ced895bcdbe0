from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from app.routes import chat, history
from chatbot.storage.db import init_db
from config.settings import get_settings


settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="[%(asctime)s] %(levelname)s - %(message)s",
)
logger = logging.getLogger("chatbot")


@asynccontextmanager
async def lifespan(_: FastAPI):
    init_db()
    logger.info(
        "Database ready; provider=%s env=%s",
        settings.llm_provider,
        settings.app_env,
    )
    yield


app = FastAPI(title="LangChain Chatbot API", version="1.0.0", lifespan=lifespan)

cors_origins = settings.cors_origins
if cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["Content-Type"],
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, errors)
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request body", "errors": errors},
    )


app.include_router(chat.router)
app.include_router(history.router)


@app.get("/", response_class=PlainTextResponse)
def index() -> str:
    return "LangChain Chatbot API is live"


@app.get("/health")
def health():
    return {"status": "ok"}


def run() -> None:
    logger.info("Server running at http://%s:%s", settings.host, settings.port)
    uvicorn.run("app.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
