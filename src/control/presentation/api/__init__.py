"""
API package.
"""
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from .errors import register_exception_handlers
from .routes import intersections
from ....common.metrics import MetricsCollector
from ...application.services.intersection_service import IntersectionService

# Initialize main app
app = FastAPI(title="CerebroVial Control API")

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow all origins for development
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
app.include_router(intersections.app.router, tags=["intersections"])

_metrics: Optional[MetricsCollector] = None

def init_app(service: IntersectionService, metrics_collector: Optional[MetricsCollector] = None):
    """Wires the shared service (and optional scheduler metrics) into the routes."""
    global _metrics
    intersections.init_service(service)
    _metrics = metrics_collector

@app.get("/health")
def health():
    return {"status": "UP"}

@app.get("/metrics")
def metrics():
    if _metrics is None:
        return {"error": "Metrics not available"}
    return _metrics.get_metrics().to_dict()
