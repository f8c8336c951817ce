"""
Basic School Results — scoring, grading and ranking engine.
FastAPI backend entry point.
"""

import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load environment before route modules read it.
load_dotenv()

from routes.grading import router as grading_router  # noqa: E402
from routes.ranking import router as ranking_router  # noqa: E402
from core.ranking import DEFAULT_TIES  # noqa: E402
from core.weights import DEFAULT_CLASS_WEIGHT, DEFAULT_EXAM_WEIGHT  # noqa: E402

SCHOOL_NAME = os.getenv("SCHOOL_NAME", "My School")
PASS_MARK = int(os.getenv("PASS_MARK", "50"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
# Comma-separated allowed origins, e.g. http://localhost:5173,https://app.example.com
raw_origins = os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000")
ALLOWED_ORIGINS = [o.strip() for o in raw_origins.split(",") if o.strip()]

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Basic School Results API",
    description=(
        "Score totals, grades and class positions for school reports, "
        "broadsheets and dashboards. Stateless: every request carries its data."
    ),
    version="1.0.0",
)

# CORS — allow the React dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register route modules
app.include_router(grading_router, prefix="/api/grading", tags=["Grading"])
app.include_router(ranking_router, prefix="/api/ranking", tags=["Ranking"])


@app.get("/api/health")
async def health_check():
    return {
        "status": "ok",
        "school_name": SCHOOL_NAME,
        "pass_mark": PASS_MARK,
    }


@app.get("/api/config")
async def get_config():
    """Return server configuration to the frontend."""
    return {
        "school_name": SCHOOL_NAME,
        "pass_mark": PASS_MARK,
        "default_weights": {"class": DEFAULT_CLASS_WEIGHT, "exam": DEFAULT_EXAM_WEIGHT},
        "rank_ties": DEFAULT_TIES,
    }
