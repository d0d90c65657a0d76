"""CloudWatch metrics for upstream IntakeQ calls, batched in the background.

Every call made by :class:`~intakeq_voice.services.intakeq_client.IntakeQClient`
records a request count, a latency sample and (on failure) an error count,
dimensioned by service and operation (e.g. ``GET /appointments``).

* Data points are buffered in memory under a lock.
* With ``METRICS_ENABLED=true`` a daemon thread flushes the buffer to
  CloudWatch every ``FLUSH_INTERVAL_SECONDS`` and once more at exit.
* Otherwise points are only logged at DEBUG and dropped on flush.
"""

from __future__ import annotations

import atexit
import logging
import os
import threading
import time
from datetime import UTC, datetime
from typing import Any

logger = logging.getLogger(__name__)

NAMESPACE = "IntakeQVoice"
FLUSH_INTERVAL_SECONDS = 60
MAX_BATCH_SIZE = 1_000  # PutMetricData limit


def _datum(
    name: str,
    value: float,
    unit: str,
    dimensions: dict[str, str],
    timestamp: datetime,
) -> dict[str, Any]:
    return {
        "MetricName": name,
        "Dimensions": [{"Name": k, "Value": v} for k, v in dimensions.items()],
        "Timestamp": timestamp,
        "Value": value,
        "Unit": unit,
    }


class MetricsClient:
    """Buffered CloudWatch publisher."""

    def __init__(self, enabled: bool | None = None) -> None:
        if enabled is None:
            enabled = os.getenv("METRICS_ENABLED", "false").lower() == "true"
        self._enabled = enabled
        self._buffer: list[dict[str, Any]] = []
        self._lock = threading.Lock()
        self._cw_client = None

        if self._enabled:
            self._start_flush_thread()

    @property
    def enabled(self) -> bool:
        return self._enabled

    def _get_cw_client(self):
        if self._cw_client is None:
            import boto3

            self._cw_client = boto3.client("cloudwatch")
        return self._cw_client

    # ── Recording ─────────────────────────────────────────────────────

    def record_success(self, service: str, operation: str, latency_ms: float) -> None:
        now = datetime.now(UTC)
        self._extend(
            _datum("Upstream/RequestCount", 1, "Count",
                   {"Service": service, "Status": "success"}, now),
            _datum("Upstream/Latency", latency_ms, "Milliseconds",
                   {"Service": service, "Operation": operation}, now),
        )
        logger.debug("Metric: %s %s ok %.1fms", service, operation, latency_ms)

    def record_failure(
        self,
        service: str,
        operation: str,
        error_type: str,
        latency_ms: float = 0,
    ) -> None:
        now = datetime.now(UTC)
        points = [
            _datum("Upstream/RequestCount", 1, "Count",
                   {"Service": service, "Status": "failure"}, now),
            _datum("Upstream/ErrorCount", 1, "Count",
                   {"Service": service, "Operation": operation, "ErrorType": error_type}, now),
        ]
        # Transport errors never produced a response, so there is no latency.
        if latency_ms > 0:
            points.append(
                _datum("Upstream/Latency", latency_ms, "Milliseconds",
                       {"Service": service, "Operation": operation}, now),
            )
        self._extend(*points)
        logger.debug("Metric: %s %s failed (%s)", service, operation, error_type)

    def flush(self) -> int:
        """Publish the buffered points; returns how many were sent."""
        with self._lock:
            batch, self._buffer = self._buffer, []

        if not batch:
            return 0
        if not self._enabled:
            logger.debug("Metrics disabled; dropped %d points", len(batch))
            return 0

        sent = 0
        try:
            cw = self._get_cw_client()
            for start in range(0, len(batch), MAX_BATCH_SIZE):
                chunk = batch[start : start + MAX_BATCH_SIZE]
                cw.put_metric_data(Namespace=NAMESPACE, MetricData=chunk)
                sent += len(chunk)
            logger.info("Flushed %d metrics to CloudWatch", sent)
        except Exception:
            logger.exception("Failed to flush metrics to CloudWatch")
        return sent

    # ── Internal ──────────────────────────────────────────────────────

    def _extend(self, *points: dict[str, Any]) -> None:
        with self._lock:
            self._buffer.extend(points)

    def _start_flush_thread(self) -> None:
        def _loop():
            while True:
                time.sleep(FLUSH_INTERVAL_SECONDS)
                try:
                    self.flush()
                except Exception:
                    logger.exception("Metrics flush thread error")

        threading.Thread(target=_loop, daemon=True, name="metrics-flush").start()
        atexit.register(self.flush)
        logger.info("Metrics flush thread started (interval=%ds)", FLUSH_INTERVAL_SECONDS)


metrics = MetricsClient()
