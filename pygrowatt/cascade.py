# pyGrowatt - Endpoint Cascade Resolver
# -*- coding: utf-8 -*-
"""
 Try an ordered list of endpoint candidates until one yields usable data.

 Every vendor capability (plant list, device list, telemetry ...) is an
 ordered strategy list of Candidate objects. first_accepted() is the single
 combinator that walks such a list; CascadeResolver binds it to HTTP, the
 authenticated session and the Response Classifier.

 Exhausting a list is not an error: callers get Exhausted (falsy) and
 decide whether a higher level path exists.
"""
import enum
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, NamedTuple, Optional, Tuple, Union

import requests

from pygrowatt.classifier import Generation, Rejected, Verdict, classify
from pygrowatt.config import Settings

log = logging.getLogger(__name__)

TIMEOUT = "timeout"
NETWORK = "network"
SKIPPED = "skipped"
DEADLINE = "deadline"
NO_VALUE = "no-value"

API = "api"
WEB = "web"


class Auth(enum.Enum):
    NONE = "none"       # login endpoints
    TOKEN = "token"     # token query parameter, no cookies needed
    COOKIE = "cookie"   # web panel, session cookies required


@dataclass(frozen=True)
class Candidate:
    """One endpoint/method/parameter combination for a capability."""
    name: str
    method: str
    base: str
    path: str
    params: Tuple[Tuple[str, str], ...] = ()
    body: Tuple[Tuple[str, str], ...] = ()
    auth: Auth = Auth.TOKEN
    generation: Generation = Generation.GENERIC

    def url(self, settings: Settings) -> str:
        base = settings.web_url if self.base == WEB else settings.api_url
        return "%s/%s" % (base, self.path.lstrip('/'))

    def render(self, context: Mapping[str, Any]) -> Tuple[dict, dict]:
        """Fill the {placeholders}; raises KeyError for a missing context value."""
        params = {key: template.format(**context) for key, template in self.params}
        body = {key: template.format(**context) for key, template in self.body}
        return params, body


class Resolved(NamedTuple):
    strategy: Any
    payload: Any
    value: Any


class Exhausted(NamedTuple):
    attempts: Tuple[Tuple[str, str], ...] = ()

    def __bool__(self):
        return False


Outcome = Union[Resolved, Exhausted]


def _name(strategy) -> str:
    return getattr(strategy, 'name', None) or repr(strategy)


def first_accepted(strategies: Iterable[Any], attempt: Callable[[Any], Verdict],
                   extract: Optional[Callable[[Any], Any]] = None, deadline: Optional[float] = None,
                   logger: Optional[logging.Logger] = None) -> Outcome:
    """
    Try strategies in order and return the first accepted one.

        attempt(strategy)   -> Accepted(payload) | Rejected(reason)
        extract(payload)    -> value; a falsy value moves on to the next strategy
        deadline            -> time.monotonic() value after which no strategy is started

    Returns Resolved(strategy, payload, value) or Exhausted(attempts).
    """
    logger = logger or log
    attempts = []
    for strategy in strategies:
        name = _name(strategy)
        if deadline is not None and time.monotonic() >= deadline:
            attempts.append((name, DEADLINE))
            logger.debug(f" -- cascade: deadline reached before {name}")
            break
        verdict = attempt(strategy)
        if isinstance(verdict, Rejected):
            attempts.append((name, verdict.reason))
            logger.debug(f" -- cascade: {name} rejected ({verdict.reason}) {verdict.detail}".rstrip())
            continue
        value = verdict.payload if extract is None else extract(verdict.payload)
        if value:
            logger.debug(f" -- cascade: {name} accepted")
            return Resolved(strategy, verdict.payload, value)
        attempts.append((name, NO_VALUE))
        logger.debug(f" -- cascade: {name} accepted but carried no usable value")
    return Exhausted(tuple(attempts))


class CascadeResolver:
    """Run candidate lists against the vendor using one authenticated session."""

    def __init__(self, transport, session, settings: Settings, deadline: Optional[float] = None,
                 logger: Optional[logging.Logger] = None):
        self.transport = transport
        self.session = session
        self.settings = settings
        self.deadline = deadline
        self.log = logger or log

    def _timeout(self) -> float:
        if self.deadline is None:
            return self.settings.timeout
        remaining = self.deadline - time.monotonic()
        return max(0.1, min(self.settings.timeout, remaining))

    def attempt(self, candidate: Candidate, context: Optional[Mapping[str, Any]] = None) -> Verdict:
        if candidate.auth == Auth.TOKEN and not self.session.auth_token:
            return Rejected(SKIPPED, "no token")
        if candidate.auth == Auth.COOKIE and not self.session.cookies:
            return Rejected(SKIPPED, "no session cookies")
        values = {'user_id': self.session.account_id or ''}
        values.update(context or {})
        try:
            params, body = candidate.render(values)
        except KeyError as exc:
            return Rejected(SKIPPED, f"missing {exc}")
        if candidate.auth == Auth.TOKEN:
            params['token'] = self.session.auth_token
        cookies = self.session.cookies if candidate.auth == Auth.COOKIE else None
        url = candidate.url(self.settings)
        try:
            response = self.transport.request(candidate.method, url, params=params or None, data=body or None,
                                              cookies=cookies, timeout=self._timeout())
        except requests.exceptions.Timeout:
            return Rejected(TIMEOUT, url)
        except requests.exceptions.RequestException as exc:
            return Rejected(NETWORK, str(exc))
        text = response.text or ""
        self.log.debug(f" -- cascade: {candidate.name} HTTP {response.status_code} ({len(text)} bytes)")
        if response.status_code >= 400 and not text.strip():
            return Rejected("http-%d" % response.status_code, url)
        return classify(text, candidate.generation)

    def resolve(self, candidates: Iterable[Candidate], context: Optional[Mapping[str, Any]] = None,
                extract: Optional[Callable[[Any], Any]] = None) -> Outcome:
        """Return the first candidate whose response is accepted (and yields a value)."""
        return first_accepted(candidates, lambda c: self.attempt(c, context), extract=extract,
                              deadline=self.deadline, logger=self.log)
