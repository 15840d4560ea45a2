import logging
from http.cookiejar import DefaultCookiePolicy
from typing import Mapping, Optional

import requests
from requests import Response

from pygrowatt.config import Settings

log = logging.getLogger(__name__)


class GrowattTransport:
    """
    HTTP transport shared by every call of one acquisition run.

    Wraps a requests.Session with a pooled adapter for connection re-use.
    The session's cookie jar refuses every Set-Cookie, so login cookies are
    only available from the login response itself and a request carries
    cookies only when the caller passes them (web panel candidates).
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.session = requests.Session()
        self.session.cookies.set_policy(DefaultCookiePolicy(allowed_domains=[]))
        # noinspection PyUnresolvedReferences
        adapter = requests.adapters.HTTPAdapter(pool_maxsize=settings.pool_maxsize)
        self.session.mount('https://', adapter)
        self.session.mount('http://', adapter)
        self.session.headers.update({
            'User-Agent': settings.user_agent,
            'Accept': 'application/json, text/plain, */*',
            'Accept-Language': 'en-US,en;q=0.9',
            'Cache-Control': 'no-cache',
        })

    def request(self, method: str, url: str, params: Optional[Mapping] = None, data: Optional[Mapping] = None,
                cookies: Optional[Mapping[str, str]] = None, timeout: Optional[float] = None) -> Response:
        """Send one request; requests exceptions propagate to the caller."""
        if timeout is None:
            timeout = self.settings.timeout
        log.debug(f" -- transport: {method} {url}")
        return self.session.request(method, url, params=params, data=data,
                                    cookies=dict(cookies) if cookies else None, timeout=timeout)

    def close(self):
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
