"""Shared wiring between the CLI and the reset scheduler.

Each get_* function picks the adapter configured in tally.conf.
"""

from .adapters.file_store import FileRecordStore
from .adapters.local_session import LocalSession
from .adapters.supabase_auth import SupabaseAuth
from .adapters.supabase_rest import SupabaseRecordStore
from .config import Config
from .ledger import TaskLedger
from .notifications import NotificationCenter
from .ports.record_store import RecordStore
from .ports.session import SessionProvider

BACKENDS = ("file", "supabase")


def _check_backend(config: Config) -> None:
    if config.backend not in BACKENDS:
        raise ValueError(f"Unknown BACKEND {config.backend!r}, expected one of: {', '.join(BACKENDS)}")


def get_session(config: Config) -> SessionProvider:
    """Resolve who is signed in for the configured backend."""
    _check_backend(config)
    if config.backend == "supabase":
        return SupabaseAuth(config)
    return LocalSession(config.local_user)


def get_store(config: Config, session: SessionProvider | None = None) -> RecordStore:
    """Record store acting on behalf of the signed-in user."""
    _check_backend(config)
    if config.backend == "supabase":
        auth = session if isinstance(session, SupabaseAuth) else SupabaseAuth(config)
        return SupabaseRecordStore(config.supabase_url, config.supabase_anon_key, auth=auth)
    return FileRecordStore(config.data_path)


def get_reset_store(config: Config) -> RecordStore:
    """Record store for the reset job, which spans every user."""
    _check_backend(config)
    if config.backend == "supabase":
        return SupabaseRecordStore(config.supabase_url, config.supabase_service_key)
    return FileRecordStore(config.data_path)


def open_ledger(config: Config) -> TaskLedger:
    session = get_session(config)
    store = get_store(config, session)
    notifications = NotificationCenter(store, session)
    return TaskLedger(store, session, notifications=notifications, tz=config.tz)


def open_notifications(config: Config) -> NotificationCenter:
    session = get_session(config)
    return NotificationCenter(get_store(config, session), session)
