"""
WayShare Backend - Change-Notification Headers
===============================================

What:  Builds the out-of-band alert headers that accompany every successful
       mutation and every entity-scoped failure.
Who:   Entity routes (success alerts) and the exception handlers in main.py
       (failure alerts). Read by wayshare.client.store for UI feedback.

Header Format (application_name = "wayShareApp"):
    Success:
        X-wayShareApp-alert:  wayShareApp.ride.created
        X-wayShareApp-params: 42
    Failure:
        X-wayShareApp-error:  error.idinvalid
        X-wayShareApp-params: ride

    The alert value is a message key, not a sentence: clients translate it.
    params is URL-encoded so any id or name survives as a header value.
"""

from typing import Dict, Optional
from urllib.parse import quote

from wayshare.config import settings

CREATED = "created"
UPDATED = "updated"
DELETED = "deleted"


def alert_header_name(application_name: Optional[str] = None) -> str:
    return f"X-{application_name or settings.application_name}-alert"


def error_header_name(application_name: Optional[str] = None) -> str:
    return f"X-{application_name or settings.application_name}-error"


def params_header_name(application_name: Optional[str] = None) -> str:
    return f"X-{application_name or settings.application_name}-params"


def create_alert(message_key: str, param: str) -> Dict[str, str]:
    return {
        alert_header_name(): message_key,
        params_header_name(): quote(param, safe=""),
    }


def entity_alert(entity_name: str, action: str, entity_id: object) -> Dict[str, str]:
    """Alert for a created / updated / deleted record, keyed by its id."""
    return create_alert(f"{settings.application_name}.{entity_name}.{action}", str(entity_id))


def entity_creation_alert(entity_name: str, entity_id: object) -> Dict[str, str]:
    return entity_alert(entity_name, CREATED, entity_id)


def entity_update_alert(entity_name: str, entity_id: object) -> Dict[str, str]:
    return entity_alert(entity_name, UPDATED, entity_id)


def entity_deletion_alert(entity_name: str, entity_id: object) -> Dict[str, str]:
    return entity_alert(entity_name, DELETED, entity_id)


def failure_alert(entity_name: Optional[str], error_key: str) -> Dict[str, str]:
    headers = {error_header_name(): f"error.{error_key}"}
    if entity_name:
        headers[params_header_name()] = quote(entity_name, safe="")
    return headers
