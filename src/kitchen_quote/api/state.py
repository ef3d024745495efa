"""
Process-wide state for the API: one live quote session and the
preferences store. Routes receive them through FastAPI dependencies so
tests can swap in their own instances.
"""
from ..services.quote_session import QuoteSession
from ..services.preferences import PreferencesStore

session = QuoteSession()
preferences_store = PreferencesStore()
preferences_store.load()


def get_session() -> QuoteSession:
    return session


def get_preferences_store() -> PreferencesStore:
    return preferences_store
