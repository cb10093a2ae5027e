from __future__ import annotations

import json
import logging
import os
import tempfile
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

__workflow_role__ = "Database"


LOCK_TIMEOUT = 30.0
LOCK_SLEEP = 0.1
STALE_LOCK_AGE_SECONDS = 300  # A lock file older than 5 minutes is considered abandoned

TABLES: Tuple[str, ...] = (
    "companies",
    "services",
    "professionals",
    "conversations",
    "messages",
    "appointments",
)

DEFAULT_MESSAGE_WINDOW = 50

logger = logging.getLogger(__name__)


def default_db_path() -> Path:
    """[Agenday Database] Resolve the JSON store location (AGENDAY_DB_PATH or project root)."""

    override = os.getenv("AGENDAY_DB_PATH")
    if override:
        return Path(override)
    return Path(__file__).resolve().parents[2] / "agenday_database.json"


def _owner_alive(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except OSError:
        return False
    return True


def _stale_reason(lock_path: Path) -> Optional[str]:
    """Why ``lock_path`` can be discarded, or None while its owner may still hold it."""

    age = time.time() - lock_path.stat().st_mtime
    content = lock_path.read_text().strip()
    if not content:
        # The owner writes its PID right after creating the file
        return "no pid" if age >= 1.0 else None
    try:
        pid = int(content)
    except ValueError:
        return f"invalid pid {content!r}"
    if not _owner_alive(pid):
        return f"pid {pid} exited"
    if age > STALE_LOCK_AGE_SECONDS:
        return f"held for {age:.0f}s"
    return None


def _cleanup_stale_lock(lock_path: Path) -> bool:
    """Delete an abandoned store lock. True when one was removed."""

    try:
        reason = _stale_reason(lock_path)
        if reason is None:
            return False
        lock_path.unlink()
    except FileNotFoundError:
        return False
    except OSError as exc:
        logger.debug("[Database] Could not inspect lock %s: %s", lock_path, exc)
        return False
    logger.warning("[Database] Removed stale store lock %s (%s)", lock_path, reason)
    return True


class FileLock:
    """[Agenday Database] Exclusive lock file next to the JSON store."""

    def __init__(self, path: Path, timeout: float = LOCK_TIMEOUT, sleep: float = LOCK_SLEEP) -> None:
        self.path = path
        self.timeout = timeout
        self.sleep = sleep
        self.fd: Optional[int] = None

    def acquire(self) -> None:
        deadline = time.monotonic() + self.timeout
        checked_stale = False
        while True:
            try:
                self.fd = os.open(self.path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
            except FileExistsError:
                if not checked_stale:
                    checked_stale = True
                    if _cleanup_stale_lock(self.path):
                        continue
                if time.monotonic() >= deadline:
                    raise TimeoutError(f"Store lock {self.path} still held after {self.timeout:.0f}s")
                time.sleep(self.sleep)
                continue
            os.write(self.fd, str(os.getpid()).encode("utf-8"))
            return

    def release(self) -> None:
        if self.fd is not None:
            os.close(self.fd)
            self.fd = None
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass

    def __enter__(self) -> "FileLock":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()


def get_default_db() -> Dict[str, Any]:
    """[Agenday Database] Baseline schema for an empty store."""

    db: Dict[str, Any] = {table: [] for table in TABLES}
    db["config"] = {}
    return db


def lock_path_for(path: Path) -> Path:
    path = Path(path)
    return path.with_name(f".{path.name}.lock")


def load_db(path: Optional[Path] = None, *, _lock_held: bool = False) -> Dict[str, Any]:
    """[Agenday Database] Load the store from disk, backfilling missing tables.

    Args:
        path: Store location (defaults to :func:`default_db_path`)
        _lock_held: Caller already holds the store lock (see :func:`store_transaction`)
    """

    path = Path(path) if path else default_db_path()
    if not path.exists():
        return get_default_db()

    if _lock_held:
        db = _read(path)
    else:
        with FileLock(lock_path_for(path)):
            db = _read(path)

    for table in TABLES:
        if not isinstance(db.get(table), list):
            db[table] = []
    if not isinstance(db.get("config"), dict):
        db["config"] = {}
    return db


def _read(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as fh:
        return json.load(fh)


def save_db(db: Dict[str, Any], path: Optional[Path] = None, *, _lock_held: bool = False) -> None:
    """[Agenday Database] Persist the store atomically (temp file + rename)."""

    path = Path(path) if path else default_db_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    out_db = {table: db.get(table, []) for table in TABLES}
    out_db["config"] = db.get("config", {})

    if _lock_held:
        _write(out_db, path)
    else:
        with FileLock(lock_path_for(path)):
            _write(out_db, path)


def _write(out_db: Dict[str, Any], path: Path) -> None:
    tmp_fd, tmp_path = tempfile.mkstemp(prefix=path.name, suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(tmp_fd, "w", encoding="utf-8") as fh:
            json.dump(out_db, fh, indent=2, ensure_ascii=False)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_path, path)
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)


@contextmanager
def store_transaction(path: Optional[Path] = None) -> Iterator[Dict[str, Any]]:
    """[Agenday Database] Hold the store lock from load to save.

    Two inbound confirmations for the same summary are serialised here, so
    the second one sees the appointment the first one created. Nothing is
    saved when the block raises.
    """

    path = Path(path) if path else default_db_path()
    with FileLock(lock_path_for(path)):
        db = load_db(path, _lock_held=True)
        yield db
        save_db(db, path, _lock_held=True)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def next_id(db: Dict[str, Any], table: str) -> int:
    """[Agenday Database] Next integer id for ``table`` (max + 1)."""

    rows = db.get(table) or []
    return max((int(row.get("id") or 0) for row in rows), default=0) + 1


def _get_by_id(db: Dict[str, Any], table: str, row_id: Any) -> Optional[Dict[str, Any]]:
    for row in db.get(table) or []:
        if row.get("id") == row_id:
            return row
    return None


def _by_company(db: Dict[str, Any], table: str, company_id: Any) -> List[Dict[str, Any]]:
    rows = [row for row in db.get(table) or [] if row.get("company_id") == company_id]
    rows.sort(key=lambda row: row.get("id") or 0)
    return rows


def get_company(db: Dict[str, Any], company_id: int) -> Optional[Dict[str, Any]]:
    return _get_by_id(db, "companies", company_id)


def get_conversation(db: Dict[str, Any], conversation_id: int) -> Optional[Dict[str, Any]]:
    return _get_by_id(db, "conversations", conversation_id)


def get_service(db: Dict[str, Any], service_id: int) -> Optional[Dict[str, Any]]:
    return _get_by_id(db, "services", service_id)


def get_professional(db: Dict[str, Any], professional_id: int) -> Optional[Dict[str, Any]]:
    return _get_by_id(db, "professionals", professional_id)


def get_appointment(db: Dict[str, Any], appointment_id: int) -> Optional[Dict[str, Any]]:
    return _get_by_id(db, "appointments", appointment_id)


def list_services(db: Dict[str, Any], company_id: int) -> List[Dict[str, Any]]:
    """[Agenday Database] Services of a company ordered by id."""

    return _by_company(db, "services", company_id)


def list_professionals(db: Dict[str, Any], company_id: int) -> List[Dict[str, Any]]:
    """[Agenday Database] Professionals of a company ordered by id."""

    return _by_company(db, "professionals", company_id)


def list_appointments(db: Dict[str, Any], company_id: int) -> List[Dict[str, Any]]:
    """[Agenday Database] Appointments of a company, soonest first."""

    rows = _by_company(db, "appointments", company_id)
    rows.sort(key=lambda row: (row.get("appointment_date") or "", row.get("appointment_time") or "", row["id"]))
    return rows


def recent_messages(
    db: Dict[str, Any],
    conversation_id: int,
    limit: int = DEFAULT_MESSAGE_WINDOW,
    exclude_ids: Iterable[int] = (),
) -> List[Dict[str, Any]]:
    """[Agenday Database] Last ``limit`` messages of a conversation, newest first."""

    excluded = set(exclude_ids)
    rows = [
        row for row in db.get("messages") or []
        if row.get("conversation_id") == conversation_id and row.get("id") not in excluded
    ]
    rows.sort(key=lambda row: (row.get("timestamp") or "", row.get("id") or 0), reverse=True)
    return rows[:limit]


def append_message(
    db: Dict[str, Any],
    conversation_id: int,
    role: str,
    content: str,
    timestamp: Optional[str] = None,
) -> Dict[str, Any]:
    """[Agenday Database] Record a message and bump the conversation's activity time."""

    conversation = get_conversation(db, conversation_id)
    if conversation is None:
        raise LookupError(f"Conversation {conversation_id} not found")

    record = {
        "id": next_id(db, "messages"),
        "conversation_id": conversation_id,
        "role": role,
        "content": content,
        "timestamp": timestamp or _now_iso(),
    }
    db.setdefault("messages", []).append(record)
    conversation["last_message_at"] = record["timestamp"]
    return record


def find_appointment_by_source(db: Dict[str, Any], source_message_id: int) -> Optional[Dict[str, Any]]:
    """[Agenday Database] Appointment already created from a given summary message."""

    for row in db.get("appointments") or []:
        if row.get("source_message_id") == source_message_id:
            return row
    return None


def insert_appointment(db: Dict[str, Any], fields: Dict[str, Any]) -> Dict[str, Any]:
    """[Agenday Database] Insert a new appointment row and return it."""

    now = _now_iso()
    record = {
        "id": next_id(db, "appointments"),
        "company_id": None,
        "conversation_id": None,
        "professional_id": None,
        "service_id": None,
        "client_name": None,
        "client_phone": None,
        "appointment_date": None,
        "appointment_time": None,
        "duration": None,
        "total_price": None,
        "status": None,
        "notes": None,
        "source_message_id": None,
        "created_at": now,
        "updated_at": now,
    }
    record.update(fields)
    db.setdefault("appointments", []).append(record)
    logger.info(
        "[Database] Appointment %s created for company %s (%s %s)",
        record["id"], record["company_id"], record["appointment_date"], record["appointment_time"],
    )
    return record


def update_appointment(db: Dict[str, Any], appointment_id: int, **changes: Any) -> Tuple[Dict[str, Any], List[str]]:
    """[Agenday Database] Apply partial updates; returns the row and the keys that changed."""

    record = get_appointment(db, appointment_id)
    if record is None:
        raise LookupError(f"Appointment {appointment_id} not found")

    updated: List[str] = []
    for key, value in changes.items():
        if record.get(key) != value:
            record[key] = value
            updated.append(key)
    if updated:
        record["updated_at"] = _now_iso()
    return record, updated
