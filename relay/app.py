# relay/app.py
import time
from contextlib import asynccontextmanager
from typing import Optional

# Load .env BEFORE any relay imports (monitoring reads env vars at import time)
from dotenv import load_dotenv, find_dotenv
load_dotenv(find_dotenv(usecwd=True))

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response, PlainTextResponse

from relay import monitoring
from relay.compute_client import ComputeClient
from relay.config import Settings
from relay.db import ProcessLogStore
from relay.errors import RelayError, error_response
from relay.orchestrator import RelayService
from relay.schemas import CalculateResponse, ErrorResponse, HealthResponse

HEALTH_STATUS = "Relay server is running"


def create_app(
    settings: Optional[Settings] = None,
    *,
    store: Optional[ProcessLogStore] = None,
    compute: Optional[ComputeClient] = None,
) -> FastAPI:
    """
    Build the relay app. Collaborators not passed in are built from settings
    during startup and closed on shutdown.
    """
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log_store = store or ProcessLogStore.from_settings(settings)
        compute_client = compute or ComputeClient.from_settings(settings)
        if settings.init_db:
            try:
                await log_store.init_db()
            except Exception:
                # the store may come up after the relay; inserts will fail until it does
                monitoring.logger.exception("DB init failed", extra={"database_url": log_store.url.split("@")[-1]})
        app.state.store = log_store
        app.state.compute = compute_client
        app.state.relay = RelayService(compute_client, log_store)
        try:
            yield
        finally:
            if compute is None:
                await compute_client.aclose()
            await log_store.dispose()

    app = FastAPI(title="Calculation Relay", lifespan=lifespan)
    app.state.settings = settings

    # -----------------------------------------------------------------------
    # Metrics middleware
    # -----------------------------------------------------------------------
    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        start = time.time()
        endpoint = request.url.path
        method = request.method
        status = "500"
        try:
            response = await call_next(request)
            status = str(response.status_code)
            return response
        except Exception:
            monitoring.logger.exception("Unhandled exception in request", extra={"path": endpoint})
            raise
        finally:
            monitoring.observe_request(start, endpoint, method, status)

    # -----------------------------------------------------------------------
    # Endpoints
    # -----------------------------------------------------------------------
    @app.get("/health", response_model=HealthResponse)
    async def health():
        return {"status": HEALTH_STATUS}

    @app.head("/health")
    async def health_head():
        return Response(status_code=200)

    @app.get(
        "/calculate",
        response_model=CalculateResponse,
        responses={500: {"model": ErrorResponse}},
    )
    async def calculate(request: Request):
        """
        GET /calculate
        Calls the compute service, logs the call to process_logs and returns
        { processNumber, result, processingTime, timestamp }.
        """
        relay: RelayService = request.app.state.relay
        try:
            resp = await relay.calculate()
            return JSONResponse(status_code=200, content=resp)
        except RelayError as e:
            monitoring.inc_failure(e.kind)
            monitoring.logger.exception("Error processing calculation", extra={"kind": e.kind})
            return error_response(e)
        except Exception:
            monitoring.inc_failure("internal")
            monitoring.logger.exception("Unexpected error in /calculate handler")
            return error_response(RelayError())

    @app.get("/metrics")
    async def metrics():
        if not monitoring.PROMETHEUS_ENABLED:
            return PlainTextResponse("Prometheus disabled", status_code=404)
        payload, content_type = monitoring.prometheus_metrics_response()
        return Response(content=payload, media_type=content_type)

    return app


app = create_app()
