import pytest

from bzrpc import BugzillaConnector
from bzrpc.exceptions import BzrpcError, StateError
from bzrpc.methods import BugzillaVersion, GetBug, LogIn, LogOut, Method, ReportBug


def test_method_shapes():
    login = LogIn('user@example.com', 'secret', remember=True)
    assert login.method_name == 'User.login'
    assert login.issues_token
    assert login.encode_params() == {
        'login': 'user@example.com', 'password': 'secret', 'remember': True}

    assert LogOut().method_name == 'User.logout'
    assert not LogOut().issues_token
    assert BugzillaVersion().encode_params() == {}

    assert GetBug(10).params == {'ids': [10], 'permissive': False}
    assert GetBug('alias').params['ids'] == ['alias']
    assert GetBug((1, 2), permissive=True).params == {'ids': [1, 2], 'permissive': True}
    assert GetBug(10).raise_faults
    assert not GetBug(10, permissive=True).raise_faults
    assert GetBug(10, permissive=True).faults == []


def test_report_bug_required_fields():
    fields = {
        'product': 'TestProduct',
        'component': 'TestComponent',
        'summary': 'it broke',
        'version': 'unspecified',
    }
    method = ReportBug(fields, op_sys='Linux')
    assert method.method_name == 'Bug.create'
    assert method.params == dict(fields, op_sys='Linux')

    with pytest.raises(BzrpcError, match='component, version'):
        ReportBug(product='TestProduct', summary='it broke')


def test_result_lifecycle():
    method = BugzillaVersion()
    assert not method.executed
    assert method.result is None
    with pytest.raises(StateError):
        method.value

    method.set_result({'version': '5.0.4'})
    assert method.executed
    assert method.value == '5.0.4'
    with pytest.raises((TypeError, AttributeError)):
        method.result['version'] = '6.0'

    with pytest.raises(StateError):
        method.set_result({'version': '6.0'})
    assert method.value == '5.0.4'


def test_parse_defaults():
    method = Method({'foo': 'bar'})
    assert method.method_name is None
    method.set_result({'a': 1})
    assert method.value == {'a': 1}

    login = LogIn('user', 'pass')
    assert login.user_id is None
    login.set_result({'id': 3, 'token': '3-abc'})
    assert login.token == '3-abc'
    assert login.user_id == 3

    logout = LogOut()
    logout.set_result({})
    assert logout.value is None


def test_registered_calls():
    for name in ('login', 'logout', 'version', 'get_bugs', 'report_bug'):
        assert callable(getattr(BugzillaConnector, name))
    assert BugzillaConnector.login.__doc__ == LogIn.__doc__


def test_registered_calls_return_values(bugzilla, connector):
    bugzilla.result({'version': '5.0.4'})
    bugzilla.result({'bugs': [{'id': 5}]})
    bugzilla.result({})
    assert connector.version() == '5.0.4'
    assert connector.get_bugs([5]) == [{'id': 5}]
    assert connector.logout() is None
    assert [x[0] for x in bugzilla.calls] == ['Bugzilla.version', 'Bug.get', 'User.logout']
