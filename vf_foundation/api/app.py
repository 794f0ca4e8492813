"""
Foundation API — FastAPI endpoints.

Operator surface over a FoundationService:
- Initialization control and progress
- Schema capabilities and the last run report
- Readiness checks
- Write-intent validation
- Cache inspection
"""

from typing import Dict, Optional

from fastapi import FastAPI, HTTPException

from vf_foundation.foundation.service import FoundationService
from vf_foundation.models.entities import EntityClass
from vf_foundation.models.validation import WriteIntent
from vf_foundation.repository.memory import InMemoryRepository


def _default_service() -> FoundationService:
    """A service over empty, writable in-memory backends."""
    repositories: Dict[EntityClass, InMemoryRepository] = {
        cls: InMemoryRepository(cls) for cls in EntityClass
    }
    return FoundationService(repositories)


# --- Application Factory ---

def create_app(service: Optional[FoundationService] = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="ValueFlows Foundation API",
        description="Baseline reconciliation and referential validation",
        version="0.1.0",
    )

    fs = service or _default_service()
    app.state.foundation_service = fs

    # === INITIALIZATION ===

    @app.get("/foundation/status")
    def get_status():
        """Current step of the initialization state machine."""
        return fs.get_status().model_dump(mode="json")

    @app.post("/foundation/initialize")
    async def initialize():
        """Run (or join) initialization."""
        try:
            await fs.initialize()
        except Exception as e:
            raise HTTPException(409, f"Foundation initialization failed: {e}")
        return fs.get_status().model_dump(mode="json")

    @app.post("/foundation/reset")
    def reset():
        """Discard state so initialization can be retried."""
        try:
            fs.reset()
        except RuntimeError as e:
            raise HTTPException(409, str(e))
        return fs.get_status().model_dump(mode="json")

    @app.get("/foundation/capabilities")
    def get_capabilities():
        """Capabilities detected by the current run."""
        if fs.capabilities is None:
            raise HTTPException(404, "Capabilities not probed yet")
        return fs.capabilities.model_dump(mode="json")

    @app.get("/foundation/report")
    def get_report():
        """Record of the latest initialization run."""
        if fs.last_report is None:
            raise HTTPException(404, "No initialization run recorded")
        return fs.last_report.model_dump(mode="json")

    # === READINESS & VALIDATION ===

    @app.get("/foundation/readiness")
    async def check_readiness():
        """Per-class readiness, freshly fetched."""
        report = await fs.check_readiness()
        return report.model_dump(mode="json")

    @app.post("/foundation/validate")
    def validate(intent: WriteIntent):
        """Validate a proposed write against the cached baseline."""
        violations = fs.validate(intent)
        return {
            "valid": not violations,
            "violations": [v.model_dump(mode="json") for v in violations],
        }

    # === CACHE ===

    def _entity_class(name: str) -> EntityClass:
        try:
            return EntityClass(name)
        except ValueError:
            raise HTTPException(404, "Unknown entity class")

    @app.get("/cache/{entity_class}")
    def list_cached(entity_class: str):
        """Entities currently cached for a class."""
        cls = _entity_class(entity_class)
        return [e.model_dump(mode="json") for e in fs.cache_for(cls).list(cls)]

    @app.post("/cache/{entity_class}/refresh")
    async def refresh_cached(entity_class: str):
        """Re-fetch a class, e.g. agents before validating writes that name them."""
        cls = _entity_class(entity_class)
        try:
            snapshot = await fs.refresh_class(cls)
        except KeyError:
            raise HTTPException(404, f"No repository registered for {cls.value}")
        except Exception as e:
            raise HTTPException(502, f"Refreshing {cls.value} failed: {e}")
        return {"entity_class": cls.value, "count": len(snapshot)}

    return app
