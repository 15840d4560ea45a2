"""Tests for the strategy-list combinator and the HTTP bound resolver."""

import json
import time

import requests

from conftest import HTML_PAGE, FakeResponse, connection_error
from pygrowatt.auth import Session
from pygrowatt.cascade import (API, DEADLINE, NETWORK, NO_VALUE, SKIPPED, TIMEOUT, WEB, Auth, Candidate,
                               CascadeResolver, Exhausted, Resolved, first_accepted)
from pygrowatt.classifier import HTML, Accepted, Generation, Rejected

TOKEN_SESSION = Session(auth_token="tok-1234", cookies={'JSESSIONID': 'abc'}, account_id="42")


class TestFirstAccepted:

    def test_returns_first_accepted_in_order(self):
        seen = []

        def attempt(name):
            seen.append(name)
            return Accepted({'name': name}) if name != "a" else Rejected(HTML)

        outcome = first_accepted(["a", "b", "c"], attempt)
        assert outcome == Resolved("b", {'name': "b"}, {'name': "b"})
        assert seen == ["a", "b"]

    def test_exhausted_is_falsy_and_records_attempts(self):
        outcome = first_accepted(["a", "b"], lambda name: Rejected("malformed"))
        assert not outcome
        assert isinstance(outcome, Exhausted)
        assert outcome.attempts == (("a", "malformed"), ("b", "malformed"))

    def test_empty_strategy_list(self):
        outcome = first_accepted([], lambda name: Accepted({}))
        assert not outcome
        assert outcome.attempts == ()

    def test_falsy_extract_moves_on(self):
        payloads = {"a": {'pac': 0}, "b": {'pac': 5}}
        outcome = first_accepted(["a", "b"], lambda name: Accepted(payloads[name]), extract=lambda p: p['pac'])
        assert outcome.strategy == "b"
        assert outcome.value == 5

    def test_accepted_without_value_is_exhausted(self):
        outcome = first_accepted(["a"], lambda name: Accepted({}), extract=lambda p: None)
        assert outcome.attempts == (("a", NO_VALUE),)

    def test_deadline_stops_before_next_strategy(self):
        calls = []
        outcome = first_accepted(["a", "b"], lambda name: calls.append(name) or Rejected("html"),
                                 deadline=time.monotonic() - 1)
        assert calls == []
        assert outcome.attempts == (("a", DEADLINE),)


class TestCascadeResolver:

    def test_token_candidate_sends_token_without_cookies(self, transport, settings):
        transport.add('PlantListAPI.do', json.dumps({'back': {'success': True, 'data': []}}))
        resolver = CascadeResolver(transport, TOKEN_SESSION, settings)
        candidate = Candidate("list", "GET", API, "PlantListAPI.do", params=(("userId", "{user_id}"),),
                              generation=Generation.TOKEN_API)
        verdict = resolver.attempt(candidate)
        assert isinstance(verdict, Accepted)
        method, path, params, data, cookies = transport.calls[0]
        assert (method, path) == ("GET", "PlantListAPI.do")
        assert params == {'userId': "42", 'token': "tok-1234"}
        assert cookies == {}

    def test_cookie_candidate_sends_cookies(self, transport, settings):
        transport.add('panel/getPlantData', json.dumps({'result': 1, 'obj': {'pac': 100}}))
        resolver = CascadeResolver(transport, TOKEN_SESSION, settings)
        candidate = Candidate("panel", "POST", WEB, "panel/getPlantData", body=(("plantId", "{plant_id}"),),
                              auth=Auth.COOKIE, generation=Generation.WEB_PANEL)
        verdict = resolver.attempt(candidate, {'plant_id': "p1"})
        assert isinstance(verdict, Accepted)
        _, _, params, data, cookies = transport.calls[0]
        assert 'token' not in params
        assert data == {'plantId': "p1"}
        assert cookies == {'JSESSIONID': 'abc'}

    def test_skips_without_required_session_state(self, transport, settings):
        resolver = CascadeResolver(transport, Session(), settings)
        token = Candidate("t", "GET", API, "x.do")
        cookie = Candidate("c", "GET", WEB, "y", auth=Auth.COOKIE)
        assert resolver.attempt(token).reason == SKIPPED
        assert resolver.attempt(cookie).reason == SKIPPED
        assert transport.calls == []

    def test_missing_placeholder_is_skipped(self, transport, settings):
        resolver = CascadeResolver(transport, TOKEN_SESSION, settings)
        candidate = Candidate("t", "GET", API, "x.do", params=(("id", "{serial}"),))
        assert resolver.attempt(candidate, {}).reason == SKIPPED
        assert transport.calls == []

    def test_network_failures_are_rejections(self, transport, settings):
        transport.add('slow.do', requests.exceptions.ReadTimeout("read timed out"))
        transport.add('down.do', connection_error())
        resolver = CascadeResolver(transport, TOKEN_SESSION, settings)
        assert resolver.attempt(Candidate("slow", "GET", API, "slow.do")).reason == TIMEOUT
        assert resolver.attempt(Candidate("down", "GET", API, "down.do")).reason == NETWORK

    def test_empty_error_status(self, transport, settings):
        transport.add('gone.do', FakeResponse("", status_code=503))
        resolver = CascadeResolver(transport, TOKEN_SESSION, settings)
        assert resolver.attempt(Candidate("gone", "GET", API, "gone.do")).reason == "http-503"

    def test_resolve_falls_through_html_to_next_candidate(self, transport, settings):
        transport.add('first.do', HTML_PAGE)
        transport.add('second.do', json.dumps({'data': {'pac': 2000}}))
        resolver = CascadeResolver(transport, TOKEN_SESSION, settings)
        candidates = (Candidate("first", "GET", API, "first.do"), Candidate("second", "GET", API, "second.do"))
        outcome = resolver.resolve(candidates, extract=lambda payload: payload['data']['pac'])
        assert outcome.strategy.name == "second"
        assert outcome.value == 2000
        assert transport.paths() == ['first.do', 'second.do']

    def test_per_attempt_timeout_bounded_by_deadline(self, settings):
        resolver = CascadeResolver(None, TOKEN_SESSION, settings, deadline=time.monotonic() + 0.5)
        assert resolver._timeout() <= 0.5
        assert CascadeResolver(None, TOKEN_SESSION, settings)._timeout() == settings.timeout
