"""
FastAPI Server for the Public Things API

Endpoints:
- GET /things/{uuid} - Single thing (301 redirect for non-canonical uuids)
- GET /things?uuid=...&uuid=... - Batch of things keyed by requested uuid
- GET /__health - Health checks
- GET /__gtg - Good-to-go
- GET /__ping, /__build-info - Status endpoints

Every lookup accepts repeated ``showRelationship`` query parameters
(broader, broaderTransitive, narrower, related).
"""

import logging
import time
from typing import List, Optional

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from .. import __version__
from ..config import ServiceConfig
from ..errors import BatchResolutionError, InvalidUUIDError, UpstreamError
from ..logging_setup import cv_transaction_id, new_transaction_id, set_transaction_id
from ..resolver import ThingResolver, validate_uuids
from ..store import ConceptStore, create_concept_store
from .health import HealthService

logger = logging.getLogger(__name__)

TRANSACTION_ID_HEADER = "X-Request-Id"


class ThingsJSONResponse(JSONResponse):
    """JSON response with an explicit charset."""
    media_type = "application/json; charset=UTF-8"


def message_response(status_code: int, message: str) -> ThingsJSONResponse:
    return ThingsJSONResponse({"message": message}, status_code=status_code)


def redirect_location(request: Request, uuid: str, canonical_uuid: str) -> str:
    """Request path and query with the first occurrence of uuid replaced."""
    location = request.url.path
    if request.url.query:
        location += "?" + request.url.query
    return location.replace(uuid, canonical_uuid, 1)


def create_app(
    store: ConceptStore,
    config: Optional[ServiceConfig] = None,
    health_service: Optional[HealthService] = None,
) -> FastAPI:
    """Create FastAPI application.

    Args:
        store: Concept store shared by all requests
        config: Service configuration (defaults are used when omitted)
        health_service: Health service (built from the store when omitted)

    Returns:
        FastAPI application instance
    """
    config = config or ServiceConfig()

    app = FastAPI(
        title="Public Things API",
        description="Public API for retrieving things (concepts) and their relationships",
        version=__version__,
    )

    # Store app state
    app.state.config = config
    app.state.store = store
    app.state.resolver = ThingResolver(store)
    app.state.health = health_service or HealthService(store, config)
    app.state.cache_control = config.cache_control

    @app.middleware("http")
    async def transaction_logging(request: Request, call_next):
        """Attach a transaction id to the request and log it."""
        transaction_id = request.headers.get(TRANSACTION_ID_HEADER) or new_transaction_id()
        request.state.transaction_id = transaction_id
        token = set_transaction_id(transaction_id)
        started = time.monotonic()
        try:
            response = await call_next(request)
            response.headers[TRANSACTION_ID_HEADER] = transaction_id
            if not request.url.path.startswith("/__"):
                elapsed_ms = (time.monotonic() - started) * 1000
                logger.info(f"{request.method} {request.url.path} {response.status_code} in {elapsed_ms:.1f}ms")
            return response
        finally:
            cv_transaction_id.reset(token)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        response = message_response(exc.status_code, str(exc.detail))
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return message_response(400, "invalid request parameters")

    @app.get("/things/{uuid}")
    def get_thing(
        uuid: str,
        request: Request,
        show_relationship: List[str] = Query(default=[], alias="showRelationship"),
    ):
        """Get a thing; non-canonical uuids are redirected to the canonical one."""
        try:
            validate_uuids(uuid)
        except InvalidUUIDError as e:
            return message_response(400, str(e))

        try:
            resolution = app.state.resolver.resolve(uuid, show_relationship, request.state.transaction_id)
        except UpstreamError as e:
            logger.error(f"Error getting thing with uuid {uuid}: {e}")
            return message_response(503, f"Error getting thing with uuid {uuid}, err={e}")

        if resolution is None:
            return message_response(404, f"No thing found with uuid {uuid}.")

        if resolution.is_redirect:
            return Response(
                status_code=301,
                headers={
                    "Location": redirect_location(request, uuid, resolution.redirect_uuid),
                    "Content-Type": ThingsJSONResponse.media_type,
                },
            )

        return ThingsJSONResponse(
            resolution.concept.to_dict(),
            headers={"Cache-Control": app.state.cache_control},
        )

    @app.get("/things")
    def get_things(
        request: Request,
        uuids: List[str] = Query(default=[], alias="uuid"),
        show_relationship: List[str] = Query(default=[], alias="showRelationship"),
    ):
        """Get a batch of things.

        Non-canonical uuids are resolved to their canonical thing (one hop at
        most) instead of redirecting; the response stays keyed by the
        requested uuids. Any lookup failure fails the whole batch.
        """
        if not uuids:
            return message_response(400, "at least one uuid query param should be provided for batch operations")

        try:
            validate_uuids(*uuids)
        except InvalidUUIDError as e:
            return message_response(400, str(e))

        try:
            things = app.state.resolver.resolve_many(uuids, show_relationship, request.state.transaction_id)
        except BatchResolutionError as e:
            return message_response(503, str(e))

        return ThingsJSONResponse(
            {"things": {uuid: concept.to_dict() for uuid, concept in things.items()}},
            headers={"Cache-Control": app.state.cache_control},
        )

    @app.get("/__health")
    def health():
        """Health checks; always 200, failures are reported in the body."""
        return ThingsJSONResponse(app.state.health.health())

    @app.get("/__gtg")
    def good_to_go():
        ok, message = app.state.health.gtg()
        return PlainTextResponse(message, status_code=200 if ok else 503, headers={"Cache-Control": "no-cache"})

    @app.get("/__ping")
    @app.get("/ping")
    def ping():
        return PlainTextResponse("pong")

    @app.get("/__build-info")
    @app.get("/build-info")
    def build_info():
        return ThingsJSONResponse({"version": __version__, "systemCode": config.app_system_code})

    return app


class ThingsAPIServer:
    """Public Things API server wrapper class."""

    def __init__(self, config: ServiceConfig, store: Optional[ConceptStore] = None):
        """Initialize API server.

        Args:
            config: Service configuration
            store: Concept store (created from config when omitted)
        """
        self.config = config
        self.store = store or create_concept_store(
            config.backend,
            env=config.env,
            uri=config.neo_url,
            user=config.neo_user,
            password=config.neo_password,
            database=config.neo_database,
            base_url=config.concepts_api_url,
            timeout=config.http_timeout,
        )
        self.app = create_app(self.store, config)

    def run(self):
        """Run API server until interrupted."""
        import uvicorn

        logger.info(
            f"public-things-api will listen on port: {self.config.port}, backend: {self.config.backend}"
        )
        try:
            uvicorn.run(self.app, host=self.config.host, port=self.config.port, log_config=None)
        finally:
            self.store.close()
