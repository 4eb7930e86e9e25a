# app/services/log_sink.py
"""
Scan log sinks: append-only stores for scan log documents.

FirebaseLogSink: Firebase Realtime Database REST API (push under a path).
DatabaseLogSink: rfid_scans table through SQLAlchemy.

Sinks are opened at startup and closed at shutdown by app.main; they raise
LogSinkError on failure and leave swallowing to the ScanRecorder.
"""

import httpx
from sqlalchemy import text
from starlette.concurrency import run_in_threadpool
from app.config import Settings
from app.models.scan_log import ScanLog
from app.utils.document import parse_iso
from app.utils.logger import get_logger

logger = get_logger(__name__)


class LogSinkError(Exception):
    """A scan log document could not be stored."""


class LogSink:
    name = "base"

    async def open(self):
        pass

    async def close(self):
        pass

    async def write(self, document: dict) -> str:
        """Store one document and return the key the store assigned."""
        raise NotImplementedError

    async def ping(self) -> bool:
        return True


class FirebaseLogSink(LogSink):
    name = "firebase"

    def __init__(self, database_url: str, path: str = "rfidScanLogs",
                 auth_secret: str = None, timeout: float = 5.0,
                 transport: httpx.AsyncBaseTransport = None):
        if not database_url:
            raise ValueError("FIREBASE_DATABASE_URL is required for the firebase scan log sink")
        self.database_url = database_url.rstrip("/")
        self.path = path.strip("/")
        self.auth_secret = auth_secret
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def _params(self) -> dict:
        return {"auth": self.auth_secret} if self.auth_secret else {}

    async def open(self):
        self._client = httpx.AsyncClient(base_url=self.database_url, timeout=self.timeout,
                                         transport=self._transport)
        logger.info(f"[SINK] Firebase scan log → {self.database_url}/{self.path}")

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None

    async def write(self, document: dict) -> str:
        if self._client is None:
            raise LogSinkError("Firebase sink is not open")
        try:
            response = await self._client.post(f"/{self.path}.json", json=document, params=self._params)
        except httpx.HTTPError as e:
            raise LogSinkError(f"Firebase request failed: {e}") from e

        if response.status_code != 200:
            raise LogSinkError(f"Firebase returned HTTP {response.status_code}: {response.text[:200]}")
        try:
            key = response.json().get("name")
        except ValueError as e:
            raise LogSinkError(f"Firebase returned a non-JSON body: {response.text[:200]}") from e
        if not key:
            raise LogSinkError("Firebase response carried no push key")
        return key

    async def ping(self) -> bool:
        if self._client is None:
            return False
        try:
            # shallow=true keeps the reply to a map of keys → true
            params = {**self._params, "shallow": "true"}
            response = await self._client.get(f"/{self.path}.json", params=params)
            return response.status_code == 200
        except httpx.HTTPError:
            return False


class DatabaseLogSink(LogSink):
    """SQLAlchemy sessions block, so inserts and pings run in the threadpool."""
    name = "database"

    def __init__(self, session_factory):
        self.session_factory = session_factory

    async def write(self, document: dict) -> str:
        return await run_in_threadpool(self._insert, document)

    async def ping(self) -> bool:
        return await run_in_threadpool(self._select_one)

    def _insert(self, document: dict) -> str:
        db = self.session_factory()
        try:
            db.add(ScanLog(
                scan_id=document["scan_id"],
                tag_id=document.get("tag_id"),
                application_id=document.get("application_id"),
                user_id=document.get("user_id"),
                scan_type=document.get("scan_type", "validation"),
                direction=document.get("direction", "both"),
                scan_result=document["scan_result"],
                scan_message=document.get("scan_message"),
                error_code=document.get("error_code"),
                error_message=document.get("error_message"),
                system_status=document.get("system_status"),
                response_time=document.get("response_time"),
                vehicle=document.get("vehicle"),
                rfid_validity=document.get("rfid_validity"),
                scan_timestamp=parse_iso(document["scan_timestamp"]),
                logged_at=parse_iso(document.get("logged_at")),
            ))
            db.commit()
        except Exception as e:
            db.rollback()
            raise LogSinkError(f"Database insert failed: {e}") from e
        finally:
            db.close()
        return document["scan_id"]

    def _select_one(self) -> bool:
        db = self.session_factory()
        try:
            db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning(f"[SINK] Database sink unreachable: {e}")
            return False
        finally:
            db.close()


def create_log_sink(settings: Settings, session_factory=None) -> LogSink:
    """Build the sink named by SCAN_LOG_SINK."""
    kind = settings.SCAN_LOG_SINK.lower()
    if kind == "firebase":
        return FirebaseLogSink(
            database_url=settings.FIREBASE_DATABASE_URL,
            path=settings.FIREBASE_SCAN_LOG_PATH,
            auth_secret=settings.FIREBASE_AUTH_SECRET,
            timeout=settings.SCAN_LOG_TIMEOUT_SECONDS,
        )
    if kind == "database":
        if session_factory is None:
            raise ValueError("database scan log sink needs a session factory")
        return DatabaseLogSink(session_factory)
    raise ValueError(f"Unknown SCAN_LOG_SINK: {settings.SCAN_LOG_SINK!r}")
