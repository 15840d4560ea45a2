# pyGrowatt - Response Classifier
# -*- coding: utf-8 -*-
"""
 Decide whether a raw vendor body is usable data.

 The platform answers login pages and error pages as HTML with HTTP 200, so
 status codes are never trusted. Every body fetched by the cascade passes
 through classify() and callers only ever see Accepted payloads.

 Generations
    TOKEN_API   - mobile/open API, payload wrapped in a "back" container
    WEB_PANEL   - server web panel, explicit "result" flag, data under "obj"
    GENERIC     - type-agnostic device queries, any data-bearing field
"""
import enum
import json
import logging
from typing import Any, NamedTuple, Optional, Union

from bs4 import BeautifulSoup

log = logging.getLogger(__name__)

HTML = "html"
MALFORMED = "malformed"
NO_DATA_MARKERS = "no-data-markers"
UNSUCCESSFUL = "unsuccessful"

# Fields whose presence means the payload carries data
DATA_FIELDS = (
    'back', 'obj', 'data', 'datas', 'deviceList', 'plantList', 'PlantList',
    'totalData', 'plantData', 'user',
    'pac', 'ppv', 'power', 'currentPower', 'activePower', 'outputPower',
    'nowPower', 'powerValue',
    'todayEnergy', 'totalEnergy', 'eToday', 'eTotal',
)


class Generation(enum.Enum):
    TOKEN_API = "token-api"
    WEB_PANEL = "web-panel"
    GENERIC = "generic"


class Accepted(NamedTuple):
    payload: Any


class Rejected(NamedTuple):
    reason: str
    detail: str = ""


Verdict = Union[Accepted, Rejected]


def html_title(body: str) -> str:
    """Best effort <title> of an HTML error page, for log context."""
    try:
        soup = BeautifulSoup(body, "html.parser")
        if soup.title and soup.title.string:
            return soup.title.string.strip()
    except Exception as exc:
        log.debug(f"Unable to parse HTML body: {exc}")
    return ""


def _flag(value: Any) -> Optional[bool]:
    # vendor flags arrive as true/false, 1/0 or "1"/"0"
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true', 'ok', 'success')
    return None


def _has_data_field(payload: dict) -> bool:
    return any(payload.get(field) not in (None, '', [], {}) for field in DATA_FIELDS)


def _check_token_api(payload: Any) -> Verdict:
    if not isinstance(payload, dict):
        return Rejected(NO_DATA_MARKERS, "expected object")
    back = payload.get('back')
    if not isinstance(back, dict):
        return Rejected(NO_DATA_MARKERS, "no back container")
    if back.get('success') is False:
        return Rejected(UNSUCCESSFUL, str(back.get('msg') or back.get('error') or ''))
    return Accepted(payload)


def _check_web_panel(payload: Any) -> Verdict:
    if isinstance(payload, list):
        if payload:
            return Accepted(payload)
        return Rejected(NO_DATA_MARKERS, "empty list")
    if not isinstance(payload, dict):
        return Rejected(NO_DATA_MARKERS, "expected object")
    for key in ('result', 'success'):
        if key in payload:
            if _flag(payload[key]):
                return Accepted(payload)
            return Rejected(UNSUCCESSFUL, str(payload.get('msg') or ''))
    if _has_data_field(payload):
        return Accepted(payload)
    return Rejected(NO_DATA_MARKERS)


def _check_generic(payload: Any) -> Verdict:
    if isinstance(payload, list):
        if payload:
            return Accepted(payload)
        return Rejected(NO_DATA_MARKERS, "empty list")
    if not isinstance(payload, dict):
        return Rejected(NO_DATA_MARKERS, "expected object")
    back = payload.get('back')
    if isinstance(back, dict) and back.get('success') is False:
        return Rejected(UNSUCCESSFUL, str(back.get('msg') or ''))
    if 'result' in payload and _flag(payload['result']) is False:
        return Rejected(UNSUCCESSFUL, str(payload.get('msg') or ''))
    if _has_data_field(payload):
        return Accepted(payload)
    return Rejected(NO_DATA_MARKERS)


CHECKS = {
    Generation.TOKEN_API: _check_token_api,
    Generation.WEB_PANEL: _check_web_panel,
    Generation.GENERIC: _check_generic,
}


def classify(body: Optional[Union[str, bytes]], generation: Generation = Generation.GENERIC) -> Verdict:
    """
    Classify a raw response body.

    Returns Accepted(parsed_json) or Rejected(reason) where reason is one of
    "html", "malformed", "no-data-markers" or "unsuccessful".
    """
    if body is None:
        return Rejected(MALFORMED, "no body")
    if isinstance(body, bytes):
        body = body.decode('utf-8', errors='replace')
    text = body.strip()
    if text.startswith('<'):
        return Rejected(HTML, html_title(text))
    try:
        payload = json.loads(text)
    except ValueError as exc:
        return Rejected(MALFORMED, str(exc))
    return CHECKS[generation](payload)
