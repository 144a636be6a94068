"""
Trace throttle mock service.

Serves a PutTraceSegments-compatible endpoint whose throttling behavior is
driven by administrative calls, so trace exporters can be tested against
both steady acceptance and rate-limited rejection.
"""

import argparse
import re
from typing import Optional, Sequence

from fastapi import Body, Query
from fastapi.responses import JSONResponse

from shared.base_service import BaseService
from shared.config import STRATEGIES, ServiceConfig, get_config
from shared.errors import InvalidArgumentError

from .schemas import (
    PutTraceSegmentsRequest,
    PutTraceSegmentsResponse,
    ThrottleResponse,
    ThrottlingExceptionBody,
)
from .throttle import AdmissionController, AdmissionStrategy, ModeStore, Verdict, build_strategy
from .throttle.models import MAX_INTENSITY, MIN_INTENSITY


DEFAULT_THROTTLE_RATE = 100

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")
# Longest digit run that can still be in range once sign and leading zeros are stripped
_MAX_RATE_DIGITS = len(str(MAX_INTENSITY))


def parse_rate(raw: Optional[str]) -> int:
    """Parse the ``rate`` query parameter of SetThrottled."""
    if raw is None or raw == "":
        return DEFAULT_THROTTLE_RATE

    if not _INTEGER_RE.fullmatch(raw):
        raise InvalidArgumentError("rate is not a number", details={"rate": raw[:32]})

    if len(raw.lstrip("+-").lstrip("0")) > _MAX_RATE_DIGITS:
        raise InvalidArgumentError(
            "rate out of range",
            details={"rate": raw[:32], "min": MIN_INTENSITY, "max": MAX_INTENSITY}
        )

    rate = int(raw)
    if rate < MIN_INTENSITY or rate > MAX_INTENSITY:
        raise InvalidArgumentError(
            "rate out of range",
            details={"rate": rate, "min": MIN_INTENSITY, "max": MAX_INTENSITY}
        )
    return rate


class ThrottleMockService(BaseService):
    """Throttle mock service implementation."""

    def __init__(self, config: Optional[ServiceConfig] = None, strategy: Optional[AdmissionStrategy] = None):
        super().__init__("throttle", config)

        self.mode_store = ModeStore(metrics=self.metrics)
        self.controller = AdmissionController(
            self.mode_store,
            strategy or build_strategy(
                self.config.strategy,
                bucket_rate=self.config.bucket_rate,
                bucket_burst=self.config.bucket_burst,
            ),
            metrics=self.metrics,
        )
        self.logger.info(
            "Admission strategy configured",
            **self.controller.strategy.describe()
        )

        self._setup_throttle_routes()

    def _setup_throttle_routes(self):
        """Set up trace ingestion and administrative routes."""

        @self.app.post("/TraceSegments")
        async def put_trace_segments(payload: Optional[PutTraceSegmentsRequest] = Body(None)):
            """Accept or throttle a batch of trace segments."""
            load = payload.load if payload else 0
            verdict = self.controller.decide(load)

            if verdict is Verdict.REJECT:
                return JSONResponse(
                    status_code=429,
                    content=ThrottlingExceptionBody().model_dump(by_alias=True)
                )

            return PutTraceSegmentsResponse()

        @self.app.post("/SetOK")
        async def set_ok():
            """Stop throttling."""
            snapshot = self.mode_store.set_accepting()
            return {"status": snapshot.mode.value}

        @self.app.post("/SetThrottled", response_model=ThrottleResponse, response_model_exclude_none=True)
        async def set_throttled(rate: Optional[str] = Query(None)):
            """Start throttling at ``rate`` percent (default 100)."""
            try:
                value = parse_rate(rate)
            except InvalidArgumentError:
                self.logger.warning("Invalid throttle rate", rate=rate)
                raise

            snapshot = self.mode_store.set_throttled(value)
            return ThrottleResponse(
                rate=snapshot.intensity,
                message=f"throttle rate set to: {snapshot.intensity}%"
            )

        @self.app.get("/Status")
        async def get_status():
            """Current mode and admission strategy state."""
            status = self.controller.get_status()
            status["uptime_seconds"] = round(self.get_uptime(), 3)
            return status


def create_app(config: Optional[ServiceConfig] = None):
    """Create throttle mock application."""
    service = ThrottleMockService(config)
    return service.app


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Mock trace-ingestion endpoint with controllable throttling.")
    parser.add_argument("--cert", default=None, help="Path to the TLS certificate file")
    parser.add_argument("--key", default=None, help="Path to the TLS key file")
    parser.add_argument("--host", default=None, help="Address to bind")
    parser.add_argument("--port", type=int, default=None, help="Port to listen on")
    parser.add_argument("--strategy", choices=STRATEGIES, default=None, help="Admission strategy")
    parser.add_argument("--bucket-rate", type=float, default=None, help="Token bucket refill rate (tokens per second)")
    parser.add_argument("--bucket-burst", type=int, default=None, help="Token bucket capacity")
    parser.add_argument("--log-level", default=None, help="Log level")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> ServiceConfig:
    """Merge command line flags over environment configuration."""
    overrides = {
        "tls_cert": args.cert,
        "tls_key": args.key,
        "host": args.host,
        "port": args.port,
        "strategy": args.strategy,
        "bucket_rate": args.bucket_rate,
        "bucket_burst": args.bucket_burst,
        "log_level": args.log_level,
    }
    return get_config("throttle", **{k: v for k, v in overrides.items() if v is not None})


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    service = ThrottleMockService(build_config(args))
    service.run()


if __name__ == "__main__":
    main()
