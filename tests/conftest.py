import pytest
import responses

from bzrpc import BugzillaConnector

from .utils import BASE, FakeBugzilla


@pytest.fixture
def bugzilla():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield FakeBugzilla(rsps)


@pytest.fixture
def connector():
    conn = BugzillaConnector()
    conn.connect_to(BASE)
    yield conn
    conn.close()
