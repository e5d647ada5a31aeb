from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from research_swarm.api.routes import research
from research_swarm.config import settings
from research_swarm.models.schemas import HealthResponse

app = FastAPI(
    title="research-swarm",
    description="Multi-stage research orchestration with cited reports",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes
app.include_router(research.router)


@app.get("/api/health", response_model=HealthResponse)
async def health():
    return HealthResponse(status="ok", service="research-swarm")
