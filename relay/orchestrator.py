# relay/orchestrator.py
import datetime
from typing import Any, Dict

from relay import monitoring
from relay.compute_client import ComputeClient
from relay.db import ProcessLogStore
from relay.schemas import CalculateResponse


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


def _now_iso() -> str:
    return _utcnow().isoformat(timespec="milliseconds") + "Z"


def _stringify_time(value: Any) -> str:
    # 42.0 -> "42", matching how the compute service's JSON number reads
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class RelayService:
    """
    One /calculate invocation: compute call, then log insert, then response.

    Collaborators are injected; the service holds no per-request state.
    UpstreamError / PersistenceError propagate to the HTTP layer.
    """

    def __init__(self, compute: ComputeClient, store: ProcessLogStore):
        self.compute = compute
        self.store = store

    async def calculate(self) -> Dict[str, Any]:
        monitoring.logger.info("Starting calculation process", extra={"compute_url": self.compute.url})
        issued_at = _utcnow()

        body, processing_time = await self.compute.fetch()
        monitoring.observe_upstream(processing_time)

        # the stored processing_time is the compute service's self-reported time;
        # the relay-measured duration is only returned to the caller
        process_number = await self.store.insert_log(issued_at, _stringify_time(body.get("time")))
        monitoring.set_last_process_number(process_number)
        monitoring.logger.info(
            f"Process {process_number} completed in {processing_time}ms",
            extra={"process_number": process_number, "processing_time_ms": processing_time},
        )

        resp = CalculateResponse(
            processNumber=process_number,
            result=body,
            processingTime=processing_time,
            timestamp=_now_iso(),
        )
        return resp.model_dump()
