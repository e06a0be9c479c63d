"""Adapters for the external services workflows talk to."""

from university_agent.integrations.calendar import CalendarProvider, MockCalendar
from university_agent.integrations.datastore import (
    DataStore,
    LocalDataStore,
    SupabaseDataStore,
    create_data_store,
)
from university_agent.integrations.ledger import Ledger, MockLedger
from university_agent.integrations.messaging import (
    Messenger,
    MockMessenger,
    TwilioMessenger,
    create_messenger,
)

__all__ = [
    "CalendarProvider",
    "DataStore",
    "Ledger",
    "LocalDataStore",
    "Messenger",
    "MockCalendar",
    "MockLedger",
    "MockMessenger",
    "SupabaseDataStore",
    "TwilioMessenger",
    "create_data_store",
    "create_messenger",
]
