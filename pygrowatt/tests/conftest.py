import json
import threading
import time

import pytest
import requests
from requests.cookies import cookiejar_from_dict

from pygrowatt.config import Settings

TOKEN = "tok-0123456789abcd"

LOGIN_OK = json.dumps({'back': {'success': True, 'msg': '', 'user': {'id': 42, 'cpowerToken': TOKEN}}})
LOGIN_BAD = json.dumps({'back': {'success': False, 'msg': '502'}})
WEB_LOGIN_OK = json.dumps({'result': 1, 'msg': 'OK', 'user': {'id': 42}})
WEB_LOGIN_BAD = json.dumps({'result': 0, 'msg': 'password error'})
HTML_PAGE = "<html><head><title>Login | Growatt</title></head><body>Please log in</body></html>"


def plant_list(*plants, total_data=None):
    back = {'success': True, 'data': list(plants)}
    if total_data is not None:
        back['totalData'] = total_data
    return json.dumps({'back': back})


class FakeResponse:
    def __init__(self, text, status_code=200, cookies=None):
        self.text = text
        self.status_code = status_code
        self.cookies = cookiejar_from_dict(cookies or {})


class FakeTransport:
    """
    Routes (path, op) to canned bodies and records every call.

    A route body may be a string, a FakeResponse, an exception instance to
    raise, or a callable(params, data) returning any of those. Unrouted
    requests answer with the vendor's HTML login page.
    """

    def __init__(self):
        self.routes = {}
        self.calls = []
        self.lock = threading.Lock()
        self.closed = False

    def add(self, path, body, op=None, cookies=None, delay=0.0):
        self.routes[(path, op)] = (body, cookies, delay)
        return self

    def paths(self):
        return [call[1] for call in self.calls]

    def request(self, method, url, params=None, data=None, cookies=None, timeout=None):
        path = url.split('/', 3)[3]
        params = dict(params or {})
        with self.lock:
            self.calls.append((method, path, params, dict(data or {}), dict(cookies or {})))
        route = self.routes.get((path, params.get('op'))) or self.routes.get((path, None))
        if route is None:
            return FakeResponse(HTML_PAGE)
        body, route_cookies, delay = route
        if delay:
            time.sleep(delay)
        if callable(body):
            body = body(params, dict(data or {}))
        if isinstance(body, Exception):
            raise body
        if isinstance(body, FakeResponse):
            return body
        return FakeResponse(body, cookies=route_cookies)

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


@pytest.fixture(name="transport")
def fixture_transport():
    return FakeTransport()


@pytest.fixture(name="logged_in")
def fixture_logged_in(transport):
    transport.add('newTwoLoginAPI.do', LOGIN_OK, cookies={'JSESSIONID': 'abc123'})
    return transport


@pytest.fixture(name="settings")
def fixture_settings():
    return Settings(timeout=1.0, run_timeout=5.0, max_workers=4, device_workers=2, user_agent="pyGrowatt/test",
                    timezone="UTC")


def connection_error():
    return requests.exceptions.ConnectionError("connection refused")
