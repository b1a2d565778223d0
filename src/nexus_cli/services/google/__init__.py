"""Google Calendar integration service package."""

from .client import GoogleCalendarClient, GoogleCalendarClientProtocol
from .connection import (
    GoogleCalendarConnectionService,
    build_authorization_url,
    decode_state,
    encode_state,
)
from .importer import GoogleCalendarSyncService, SyncStage
from .mapper import map_google_event
from .models import FetchEventsResult, GoogleCalendarEvent, MappedGoogleEvent
from .reconciler import ConflictReconciler, ReconcileDecision, SyncAction
from .tokens import TokenManager

__all__ = [
    "GoogleCalendarClient",
    "GoogleCalendarClientProtocol",
    "GoogleCalendarConnectionService",
    "GoogleCalendarSyncService",
    "SyncStage",
    "TokenManager",
    "ConflictReconciler",
    "ReconcileDecision",
    "SyncAction",
    "map_google_event",
    "build_authorization_url",
    "encode_state",
    "decode_state",
    "FetchEventsResult",
    "GoogleCalendarEvent",
    "MappedGoogleEvent",
]
