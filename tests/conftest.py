"""
Shared fixtures for katsini tests.

FakeSession stands in for BrowserSession so scanners can be driven without a
browser: it serves canned text, attributes and evaluate() results, records
every call in order, and raises configured errors on a given step.
"""

import pytest

from katsini.config import BrowserConfig, Config, HuaweiCredentials


class FakeSession:
    def __init__(self, texts=None, evaluations=None, attributes=None, fail_on=None):
        self.texts = texts or {}
        self.evaluations = evaluations or {}
        self.attributes = attributes or {}
        self.fail_on = fail_on or {}
        self.calls = []
        self.policy = None
        self.timeout = None
        self.opened = False
        self.closed = False

    # used as the scanner's session_factory
    def __call__(self, config, policy, timeout=None):
        self.policy = policy
        self.timeout = timeout
        return self

    def __enter__(self):
        self.opened = True
        return self

    def __exit__(self, exc_type, exc, tb):
        self.closed = True

    def _step(self, op, target):
        self.calls.append((op, target))
        err = self.fail_on.get(target) or self.fail_on.get(op)
        if err is not None:
            raise err

    def navigate(self, url):
        self._step("navigate", url)

    def wait_visible(self, selector):
        self._step("wait_visible", selector)

    def click(self, selector):
        self._step("click", selector)

    def read_text(self, selector):
        self._step("read_text", selector)
        return self.texts[selector]

    def read_attribute(self, selector, name):
        self._step("read_attribute", selector)
        return self.attributes[(selector, name)]

    def evaluate(self, script):
        self._step("evaluate", script)
        for fragment, value in self.evaluations.items():
            if fragment in script:
                return value
        return None

    def ops(self):
        return [op for op, _ in self.calls]


@pytest.fixture
def browser_config():
    return BrowserConfig(timeout_seconds=5)


@pytest.fixture
def config(browser_config):
    return Config(browser=browser_config)


@pytest.fixture
def config_with_credentials(browser_config):
    return Config(
        browser=browser_config,
        huawei=HuaweiCredentials(client_id="client-123", client_secret="s3cret"),
    )


@pytest.fixture
def fake_session():
    return FakeSession
