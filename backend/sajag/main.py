import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sajag.api.routes import router
from sajag.config import get_settings
from sajag.models.schemas import AnalysisResult
from sajag.services.coordinator import build_coordinators

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def log_analysis_ready(result: AnalysisResult) -> None:
    """Post-analysis hook. The UI scrolls to the result; the server just notes it."""
    logger.info(f"Analysis ready: credibilityScore={result.credibility_score}")


# =============================================================================
# LIFESPAN: Startup and Shutdown Logic
# =============================================================================
#
# Startup builds the three coordinators around one shared HTTP client.
# Shutdown closes that client so no connections are left dangling.
#
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    coordinators = build_coordinators(settings, on_analysis_ready=log_analysis_ready)
    app.state.coordinators = coordinators

    yield

    await coordinators.close()


app = FastAPI(
    title="SĀJĀG",
    description="AI-powered misinformation detector: credibility analysis, summaries and facts",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
