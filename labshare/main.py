import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import ALLOWED_ORIGINS, LOG_LEVEL
from .logging_middleware import LoggingMiddleware
from .services.database import create_db_and_tables
from .routers import admin, comments, labs, submissions

logging.basicConfig(level=LOG_LEVEL)

app = FastAPI(title="LabShare")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(LoggingMiddleware)

@app.get("/health")
def health():
    return {"status": "ok"}

app.include_router(submissions.router)
app.include_router(comments.router)
app.include_router(labs.router)
app.include_router(admin.router)

@app.on_event("startup")
def on_startup():
    create_db_and_tables()
