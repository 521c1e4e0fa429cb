"""Pytest fixtures for the CCB form-response pipeline tests."""

import httpx
import pytest

from ccb_proxy.integrations.clients.real_http.ccb import CCBClient
from ccb_proxy.utils.config_loader import CCBConfig, RetryConfig
from ccb_proxy.integrations.policy.retry import RetryPolicy

CCB_URL = "https://church.ccbchurch.test"

SCENARIO_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<ccb_api>
  <request>
    <parameters>
      <argument value="form_responses" name="srv"/>
      <argument value="85" name="form_id"/>
    </parameters>
  </request>
  <response>
    <service>form_responses</service>
    <service_action>execute</service_action>
    <availability>public</availability>
    <form_responses count="1">
      <form_response id="4021">
        <form id="85">Connect Card</form>
        <individual id="311">Alex Doe</individual>
        <created>2024-01-02</created>
        <modified>2024-01-02</modified>
        <profile_fields>
          <profile_info name="Email">a@b.com</profile_info>
        </profile_fields>
        <answers>
          <title>Q1</title>
          <choice>Yes</choice>
        </answers>
      </form_response>
    </form_responses>
  </response>
</ccb_api>
"""


class FakeClock:
    """Monotonic clock + sleep pair; sleeping just moves time forward."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    async def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


class RecordingHandler:
    """httpx.MockTransport handler replaying a list of responses (or exceptions)."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, int):
            return httpx.Response(outcome, content=b"")
        return outcome


@pytest.fixture
def ccb_config():
    return CCBConfig(username="ccb-user", password="ccb-pass", api_url=CCB_URL, default_timeout=5)


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def retry_policy(fake_clock):
    return RetryPolicy(RetryConfig(), clock=fake_clock, sleep=fake_clock.sleep)


@pytest.fixture
def make_client(ccb_config):
    def _make(handler):
        return CCBClient(ccb_config, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))

    return _make
