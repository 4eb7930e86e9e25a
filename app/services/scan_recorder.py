# app/services/scan_recorder.py
"""
Scan recorder. Turns a ValidationOutcome into a scan log document and
hands it to the configured LogSink.

Best-effort: sink failures are logged and swallowed, record() never raises,
so a scan's status code is fixed before and regardless of logging.

Delivery modes (SCAN_LOG_MODE):
  sync        The scan handler awaits the sink write before responding,
              so sink latency adds to scan latency.
  background  Entries go into a bounded queue drained by a worker task.
              When the queue is full the new entry is dropped with a warning.
"""

import asyncio
import uuid
from datetime import datetime
from typing import Optional
from app.services.log_sink import LogSink
from app.services.tag_validator import ValidationOutcome
from app.utils.document import normalize_document
from app.utils.logger import get_logger

logger = get_logger(__name__)

MODE_SYNC = "sync"
MODE_BACKGROUND = "background"


def response_time_ms(started_at: datetime, responded_at: datetime) -> int:
    elapsed = (responded_at - started_at).total_seconds() * 1000
    return max(0, int(round(elapsed)))


def build_scan_entry(outcome: ValidationOutcome, tag_id: Optional[str],
                     started_at: datetime, responded_at: datetime,
                     logged_at: Optional[datetime] = None) -> dict:
    """Sparse, JSON-ready scan log document for one validation attempt."""
    return normalize_document({
        "scan_id": uuid.uuid4().hex,
        "tag_id": tag_id,
        "application_id": outcome.application_id,
        "user_id": outcome.user_id,
        "vehicle": outcome.vehicle,
        "rfid_validity": outcome.rfid_validity,
        "scan_type": "validation",
        "direction": "both",
        "system_status": "online",
        "scan_result": outcome.scan_result,
        "scan_message": outcome.scan_message,
        "error_code": outcome.error_code,
        "error_message": outcome.error_message,
        "response_time": response_time_ms(started_at, responded_at),
        "scan_timestamp": started_at,
        "logged_at": logged_at or datetime.utcnow(),
    })


class ScanRecorder:
    def __init__(self, sink: LogSink, mode: str = MODE_SYNC,
                 queue_size: int = 1000, drain_timeout: float = 10.0):
        if mode not in (MODE_SYNC, MODE_BACKGROUND):
            raise ValueError(f"Unknown scan log mode: {mode!r}")
        self.sink = sink
        self.mode = mode
        self.queue_size = queue_size
        self.drain_timeout = drain_timeout
        self._queue: Optional[asyncio.Queue] = None
        self._worker: Optional[asyncio.Task] = None

        self.written = 0
        self.failed = 0
        self.dropped = 0

    async def start(self):
        if self.mode == MODE_BACKGROUND and self._worker is None:
            self._queue = asyncio.Queue(maxsize=self.queue_size)
            self._worker = asyncio.create_task(self._drain())
            logger.info(f"[RECORDER] Background scan logging started (queue={self.queue_size})")

    async def stop(self):
        if self._worker is None:
            return
        try:
            await asyncio.wait_for(self._queue.join(), timeout=self.drain_timeout)
        except asyncio.TimeoutError:
            unwritten = self._queue.qsize()
            self.dropped += unwritten
            logger.warning(f"[RECORDER] Shutdown with {unwritten} scan log entries unwritten")
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None
        self._queue = None

    @property
    def stats(self) -> dict:
        return {
            "mode": self.mode,
            "written": self.written,
            "failed": self.failed,
            "dropped": self.dropped,
            "queued": self._queue.qsize() if self._queue else 0,
        }

    async def record(self, outcome: ValidationOutcome, tag_id: Optional[str],
                     started_at: datetime, responded_at: datetime):
        try:
            entry = build_scan_entry(outcome, tag_id, started_at, responded_at)
        except Exception as e:
            self.failed += 1
            logger.error(f"[RECORDER] Could not build scan log entry for tag {tag_id}: {e}", exc_info=True)
            return

        if self._worker is None:
            await self._write(entry)
            return

        try:
            self._queue.put_nowait(entry)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning(f"[RECORDER] Queue full, dropped scan log for tag {tag_id} ({outcome.scan_result})")

    async def _write(self, entry: dict):
        try:
            key = await self.sink.write(entry)
        except Exception as e:
            self.failed += 1
            logger.error(f"[RECORDER] {self.sink.name} sink write failed for tag {entry.get('tag_id')}: {e}")
            return
        self.written += 1
        plate = entry.get("vehicle", {}).get("plate_number", "N/A")
        logger.info(f"[RECORDER] Scan logged key={key} tag={entry.get('tag_id')} "
                    f"result={entry.get('scan_result')} plate={plate}")

    async def _drain(self):
        while True:
            entry = await self._queue.get()
            try:
                await self._write(entry)
            finally:
                self._queue.task_done()
