# pyGrowatt - Session Authenticator
# -*- coding: utf-8 -*-
"""
 Log in to the Growatt platform and build the run's Session.

 Login generations are tried in order (token API, then web panel) with the
 same hashed secret. The first generation that answers with its success
 marker wins and its session cookies are captured. A network failure (no
 response at all) stops immediately with UpstreamUnreachable instead of
 trying the next generation, so "vendor is down" is never reported as
 "bad password".
"""
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional

import growattServer
import requests

from pygrowatt import endpoints
from pygrowatt.cascade import first_accepted
from pygrowatt.classifier import Accepted, Generation, Rejected, classify
from pygrowatt.config import Settings
from pygrowatt.exceptions import AuthRejected, MissingCredentials, UpstreamUnreachable

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credential:
    username: str
    secret: str = field(repr=False)

    def __bool__(self):
        return bool(self.username) and bool(self.secret)


@dataclass(frozen=True)
class Session:
    """Authenticated state shared read-only by every call of one run."""
    auth_token: str = ""
    cookies: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    account_id: Optional[str] = None
    generation: str = ""

    def __post_init__(self):
        if not isinstance(self.cookies, MappingProxyType):
            object.__setattr__(self, 'cookies', MappingProxyType(dict(self.cookies or {})))


def hash_password(secret: str) -> str:
    """
    Growatt password digest: lowercase MD5 hex with every '0' at an even
    index replaced by 'c' (growattServer's implementation).
    """
    return growattServer.hash_password(secret)


def mask(token: Optional[str]) -> str:
    if not token:
        return 'null'
    return '***' + token[-4:]


def _account_id(*sources: Any) -> Optional[str]:
    for source in sources:
        if isinstance(source, dict):
            value = source.get('id') or source.get('userId')
            if value not in (None, ''):
                return str(value)
    return None


def session_from_token_api(payload: dict, cookies: Mapping[str, str]) -> Optional[Session]:
    back = payload.get('back') or {}
    user = back.get('user') or {}
    if back.get('success') is not True:
        return None
    token = user.get('cpowerToken') or back.get('token')
    if not token:
        return None
    return Session(auth_token=str(token), cookies=cookies, account_id=_account_id(user, back),
                   generation=endpoints.LOGIN_TOKEN_API.name)


def session_from_web_panel(payload: Any, cookies: Mapping[str, str]) -> Optional[Session]:
    if not isinstance(payload, dict) or not cookies:
        # web panel auth lives entirely in the cookies
        return None
    return Session(auth_token=str(payload.get('token') or ''), cookies=cookies,
                   account_id=_account_id(payload.get('user'), payload.get('obj')),
                   generation=endpoints.LOGIN_WEB_PANEL.name)


SESSION_BUILDERS = {
    Generation.TOKEN_API: session_from_token_api,
    Generation.WEB_PANEL: session_from_web_panel,
}


def authenticate(credential: Credential, transport, settings: Settings,
                 logger: Optional[logging.Logger] = None) -> Session:
    """
    Return a Session for credential.

    Raises MissingCredentials before any network I/O when username or secret
    is empty, UpstreamUnreachable on a network failure, AuthRejected when
    every login generation refused us.
    """
    logger = logger or log
    if not credential:
        raise MissingCredentials()
    context = {'username': credential.username, 'password': hash_password(credential.secret)}

    def attempt(candidate):
        url = candidate.url(settings)
        _, body = candidate.render(context)
        try:
            response = transport.request(candidate.method, url, data=body, timeout=settings.timeout)
        except requests.exceptions.RequestException as exc:
            logger.debug(f"login - {candidate.name} unreachable: {exc}")
            raise UpstreamUnreachable(f"upstream unreachable: {exc}") from exc
        verdict = classify(response.text, candidate.generation)
        if isinstance(verdict, Rejected):
            return verdict
        session = SESSION_BUILDERS[candidate.generation](verdict.payload, response.cookies.get_dict())
        if session is None:
            return Rejected("no-session-state", candidate.name)
        return Accepted(session)

    outcome = first_accepted(endpoints.LOGIN_CANDIDATES, attempt, logger=logger)
    if not outcome:
        reasons = ", ".join(f"{name}: {reason}" for name, reason in outcome.attempts)
        logger.debug(f"login failed for {credential.username} ({reasons})")
        raise AuthRejected()
    session = outcome.value
    logger.info(f"Authenticated {credential.username} via {session.generation} "
                f"(token {mask(session.auth_token)}, {len(session.cookies)} cookies)")
    return session
