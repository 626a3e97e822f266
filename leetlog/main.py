"""
LeetLog - FastAPI Application

A practice journal for LeetCode problems that:
- Caches problem metadata fetched from a problem URL
- Logs timed attempts with notes, code and a solved/attempted outcome
- Keeps each problem's best recent solve time up to date
- Labels every problem mastered / revisit / rusty / weak from solve time,
  difficulty and how recent the attempts are
- Scores topic categories for radar charts and a composite GPA

Run with: uvicorn leetlog.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .database import get_database_type, init_db
from .logging_config import setup_logging
from .routers import analytics, logs, user_problems, users

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    setup_logging()
    logger.info("Starting LeetLog...")

    init_db()

    yield

    logger.info("Shutting down LeetLog...")


app = FastAPI(
    title="LeetLog",
    description="""
A personal progress journal for algorithm practice problems.

## How It Works

1. **Add a problem** by its LeetCode URL; title, difficulty and tags are fetched once and cached
2. **Log attempts** with the time spent, notes, your solution and whether you solved it
3. **Check the dashboard** for each problem's readiness
4. **Open analytics** for category scores and your overall GPA

## Readiness

- Logs expire one month after they are written; only live logs count
- The best live solve time is compared with per-difficulty thresholds
  (easy 10/20 min, medium 25/40 min, hard 45/75 min)
- A recent failed attempt marks the problem **weak**
- **Mastered** problems not solved for over a month become **rusty**

Identify yourself with the `X-User-Id` header.
""",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.api.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(users.router)
app.include_router(user_problems.router)
app.include_router(logs.router)
app.include_router(analytics.router)


@app.get("/", tags=["root"])
def read_root():
    """Root endpoint with API information."""
    return {
        "name": "LeetLog",
        "version": "1.0.0",
        "docs": "/docs",
        "endpoints": {
            "users": "/users",
            "user_problems": "/user-problem",
            "logs": "/log",
            "analytics": "/analytics",
        },
    }


@app.get("/health", tags=["health"])
def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "database": get_database_type()}
