from __future__ import annotations

from datetime import datetime, timezone

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from .admin.models import (
    DurableInvalidationRequest,
    DurableInvalidationResponse,
    MemoryInvalidationRequest,
    MemoryInvalidationType,
    RefreshRequest,
    RefreshResponse,
)
from .analytics.aggregator import compute_analytics
from .auth.dependencies import get_admin_credential, require_admin, require_user
from .auth.models import LoginRequest
from .auth.users import DEFAULT_AUTH_CONFIG, AdminCredential, authenticate
from .engine import Engine, build_engine
from .errors import AuthorizationError, ValidationError
from .geo.models import GeoPoint, NearbyRequest, NearbyResponse
from .lookups.models import AttributeKind, BatchRequest, BatchResponse, LookupResponse

app = FastAPI(title="Taipei Food Map API", version="1.0.0")
app.add_middleware(SessionMiddleware, secret_key=DEFAULT_AUTH_CONFIG.session_secret)
app.state.engine = build_engine()


def get_engine(request: Request) -> Engine:
    return request.app.state.engine


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@app.exception_handler(ValidationError)
async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(AuthorizationError)
async def _authorization_error(request: Request, exc: AuthorizationError) -> JSONResponse:
    status = 401 if exc.anonymous else 403
    return JSONResponse(status_code=status, content={"detail": str(exc)})


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata(engine: Engine = Depends(get_engine)) -> dict:
    return engine.catalog.metadata()


# ── Auth endpoints ───────────────────────────────────────────────────────


@app.post("/auth/login")
def login(body: LoginRequest, request: Request) -> dict:
    user = authenticate(body.username, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    request.session["user"] = user
    return {"status": "ok", "user": user}


@app.post("/auth/logout")
def logout(request: Request) -> dict:
    request.session.clear()
    return {"status": "logged_out"}


@app.get("/auth/me")
def auth_me(user: dict = Depends(require_user)) -> dict:
    return user


# ── Lookup endpoints ─────────────────────────────────────────────────────


@app.post("/batch", response_model=BatchResponse)
async def batch(
    body: BatchRequest,
    user: dict = Depends(require_user),
    engine: Engine = Depends(get_engine),
) -> BatchResponse:
    results = await engine.batch.aggregate(body.restaurants, body.include)
    return BatchResponse(results=results)


@app.get("/restaurants/{name}/{kind}", response_model=LookupResponse)
async def restaurant_attribute(
    name: str,
    kind: AttributeKind,
    user: dict = Depends(require_user),
    engine: Engine = Depends(get_engine),
) -> LookupResponse:
    result = await engine.lookups.lookup(name, kind)
    return LookupResponse(
        name=name, kind=kind, source=result.source, found=result.found, data=result.value,
    )


@app.post("/nearby", response_model=NearbyResponse)
async def nearby(
    body: NearbyRequest,
    user: dict = Depends(require_user),
    engine: Engine = Depends(get_engine),
) -> NearbyResponse:
    origin = GeoPoint(lat=body.lat, lng=body.lng)
    results = await engine.nearby.nearby(
        origin,
        body.radius_meters,
        limit=body.limit,
        category=body.category,
        live=body.live,
    )
    return NearbyResponse(
        results=[r.to_dict() for r in results],
        total=len(results),
        user_location={"lat": body.lat, "lng": body.lng},
    )


# ── Admin endpoints ──────────────────────────────────────────────────────


@app.get("/cache/stats")
def cache_stats(
    credential: AdminCredential = Depends(require_admin),
    engine: Engine = Depends(get_engine),
) -> dict:
    return {"success": True, "stats": engine.caches.stats(), "timestamp": _now_iso()}


@app.post("/cache/memory/invalidate")
def invalidate_memory(
    body: MemoryInvalidationRequest,
    credential: AdminCredential = Depends(get_admin_credential),
    engine: Engine = Depends(get_engine),
) -> dict:
    if body.type is MemoryInvalidationType.all:
        engine.invalidation.invalidate_all(credential)
        return {"success": True, "message": "All memory caches invalidated", "removed": None}

    removed = engine.invalidation.invalidate_entity(credential, body.name or "")
    return {"success": True, "message": f"Cache for {body.name} invalidated", "removed": removed}


@app.post("/cache/invalidate", response_model=DurableInvalidationResponse)
async def invalidate_durable(
    body: DurableInvalidationRequest,
    credential: AdminCredential = Depends(get_admin_credential),
    engine: Engine = Depends(get_engine),
) -> DurableInvalidationResponse:
    deleted = await engine.invalidation.invalidate_by_type(credential, body.type, body.name)
    return DurableInvalidationResponse(
        message="Cache invalidated successfully",
        timestamp=_now_iso(),
        type=body.type,
        restaurant_name=body.name or "all",
        deleted=deleted,
    )


@app.get("/cache/invalidate")
async def durable_status(
    credential: AdminCredential = Depends(get_admin_credential),
    engine: Engine = Depends(get_engine),
) -> dict:
    status = await engine.invalidation.status(credential)
    return {"timestamp": _now_iso(), "cache": status}


@app.post("/cache/refresh", response_model=RefreshResponse)
async def refresh_reviews(
    body: RefreshRequest,
    credential: AdminCredential = Depends(require_admin),
    engine: Engine = Depends(get_engine),
) -> RefreshResponse:
    names = body.restaurants or engine.catalog.names()
    report = await engine.refresher.run(names)
    return RefreshResponse(
        message="Review refresh completed",
        timestamp=_now_iso(),
        total=report.total,
        success_count=len(report.succeeded),
        failed_count=len(report.failed),
        failed=report.failed[:10],
    )


@app.get("/analytics")
def analytics(
    credential: AdminCredential = Depends(require_admin),
    engine: Engine = Depends(get_engine),
) -> dict:
    return compute_analytics(engine.events.events())
