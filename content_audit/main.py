"""Content Security Audit — FastAPI application entry point.

Admin API over the audit core: vector configuration, per-bundle
settings, entity reports, batch runs and cache statistics. The host
installs the wired services with content_audit.services.set_services()
before serving.
"""

from contextlib import asynccontextmanager
from dataclasses import asdict

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel, Field

from content_audit.batch.selection import parse_bundles
from content_audit.errors import InvalidVectorError
from content_audit.logging.audit import get_audit_logger, setup_logging
from content_audit.providers.registry import close_all_backends
from content_audit.security.auth import verify_api_key
from content_audit.services import AuditServices, get_services
from content_audit.vectors.models import SecurityVector

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle hooks."""
    setup_logging()
    get_audit_logger().info("Content audit API started")
    yield
    await close_all_backends()
    get_audit_logger().info("Content audit API stopped")


app = FastAPI(
    title="Content Security Audit",
    description="LLM-scored security audit of content entities",
    version=VERSION,
    lifespan=lifespan,
)


class VectorIn(BaseModel):
    id: str
    label: str
    description: str = ""
    weight: int | None = None


class VectorsReplace(BaseModel):
    vectors: list[VectorIn]


class BundleSettingsIn(BaseModel):
    enabled: bool | None = None
    vectors: dict[str, bool] | None = None


class BatchRequest(BaseModel):
    bundles: list[str] = Field(min_length=1)
    force_refresh: bool = False
    limit: int = Field(default=100, ge=0, le=10000)


async def _load_entity(services: AuditServices, entity_type: str, entity_id: str):
    entity = await services.entity_store.load(entity_type, entity_id)
    if entity is None:
        raise HTTPException(status_code=404, detail=f"{entity_type} {entity_id} not found")
    return entity


@app.get("/health")
async def health():
    return {"status": "healthy", "version": VERSION}


@app.get("/v1/vectors", dependencies=[Depends(verify_api_key)])
async def list_vectors(services: AuditServices = Depends(get_services)):
    return {
        "vectors": [asdict(v) for v in services.registry.ordered()],
        "config_hash": services.registry.config_hash(),
    }


@app.post("/v1/vectors", status_code=201, dependencies=[Depends(verify_api_key)])
async def add_vector(body: VectorIn, services: AuditServices = Depends(get_services)):
    if services.registry.get(body.id) is not None:
        raise HTTPException(status_code=409, detail=f"Vector '{body.id}' already exists")
    try:
        vector = await services.registry.save(body.id, body.model_dump(exclude={"id"}))
    except InvalidVectorError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return asdict(vector)


@app.put("/v1/vectors", dependencies=[Depends(verify_api_key)])
async def replace_vectors(body: VectorsReplace, services: AuditServices = Depends(get_services)):
    # Rows without a weight keep their position in the submitted list
    vectors = [
        SecurityVector(
            id=v.id, label=v.label, description=v.description,
            weight=v.weight if v.weight is not None else position,
        )
        for position, v in enumerate(body.vectors)
    ]
    try:
        await services.registry.replace_all(vectors)
    except InvalidVectorError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"vectors": [asdict(v) for v in services.registry.ordered()]}


@app.delete("/v1/vectors/{vector_id}", dependencies=[Depends(verify_api_key)])
async def delete_vector(vector_id: str, services: AuditServices = Depends(get_services)):
    if not await services.registry.delete(vector_id):
        raise HTTPException(status_code=404, detail=f"Vector '{vector_id}' not found")
    return {"deleted": vector_id}


@app.get("/v1/bundles/{entity_type}/{bundle}", dependencies=[Depends(verify_api_key)])
async def get_bundle_settings(entity_type: str, bundle: str,
                              services: AuditServices = Depends(get_services)):
    settings = services.bundle_settings
    return {
        "enabled": settings.is_enabled(entity_type, bundle),
        "vectors": settings.vector_selection(entity_type, bundle),
        "enabled_vectors": [v.id for v in settings.enabled_vectors(entity_type, bundle)],
    }


@app.put("/v1/bundles/{entity_type}/{bundle}", dependencies=[Depends(verify_api_key)])
async def save_bundle_settings(entity_type: str, bundle: str, body: BundleSettingsIn,
                               services: AuditServices = Depends(get_services)):
    services.bundle_settings.save(entity_type, bundle, enabled=body.enabled, vectors=body.vectors)
    return await get_bundle_settings(entity_type, bundle, services)


@app.get("/v1/entities/{entity_type}/{entity_id}/summary", dependencies=[Depends(verify_api_key)])
async def entity_summary(entity_type: str, entity_id: str,
                         services: AuditServices = Depends(get_services)):
    entity = await _load_entity(services, entity_type, entity_id)
    return asdict(await services.analyzer.summary(entity))


@app.get("/v1/entities/{entity_type}/{entity_id}/report", dependencies=[Depends(verify_api_key)])
async def entity_report(entity_type: str, entity_id: str,
                        services: AuditServices = Depends(get_services)):
    entity = await _load_entity(services, entity_type, entity_id)
    return asdict(await services.analyzer.full_report(entity))


@app.post("/v1/batches", dependencies=[Depends(verify_api_key)])
async def run_batch(body: BatchRequest, services: AuditServices = Depends(get_services)):
    """Select candidates and analyze them chunk by chunk."""
    try:
        bundles = parse_bundles(body.bundles)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    candidates = await services.selector.select(bundles, body.force_refresh, body.limit)
    if not candidates:
        return {"success": True, "processed": 0, "total": 0, "errors": [],
                "message": "No entities found for analysis."}

    job = services.orchestrator.create_job(candidates, body.force_refresh)
    outcome = await services.orchestrator.run_to_completion(job)
    return {"total": job.context.total, **asdict(outcome)}


@app.get("/v1/statistics", dependencies=[Depends(verify_api_key)])
async def statistics(services: AuditServices = Depends(get_services)):
    return {
        **asdict(await services.cache.get_statistics()),
        "average_scores": await services.cache.get_average_scores(),
        "available_bundles": services.bundle_settings.available_bundles(),
    }
