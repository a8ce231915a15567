"""Bugzilla web service methods.

Every method names a remote command, supplies the parameters to send and is
handed the result once a connector executed it successfully.
"""

from snakeoil.mappings import ImmutableDict

from .connector import BugzillaConnector, method_cmd
from .exceptions import BzrpcError, StateError


class Method(object):
    """Generic remote method."""

    # remote command name, e.g. 'Bug.get'
    command = None
    # capability tag: results carry a session token exposed via .token
    issues_token = False
    # raise the first entry of a "faults" array in the result
    raise_faults = True

    def __init__(self, params=None):
        self.params = dict(params) if params is not None else {}
        self._result = None

    def __repr__(self):
        return f'<{self.__class__.__name__} {self.command!r}>'

    @property
    def method_name(self):
        return self.command

    def encode_params(self):
        """Return the parameter mapping sent to the service."""
        return self.params

    @property
    def executed(self):
        return self._result is not None

    def set_result(self, result):
        """Receive the result mapping of a successful call."""
        if self._result is not None:
            raise StateError(f'{self.command}: result already set')
        if not isinstance(result, ImmutableDict):
            result = ImmutableDict(result)
        self._result = result

    @property
    def result(self):
        """Read-only result mapping, None until executed."""
        return self._result

    def parse(self, data):
        """Extract the interesting part of a result mapping."""
        return data

    @property
    def value(self):
        if self._result is None:
            raise StateError(f'{self.command}: method not executed')
        return self.parse(self._result)


@method_cmd(BugzillaConnector, cmd='login')
class LogIn(Method):
    """Log in to an installation, yielding a session token."""

    command = 'User.login'
    issues_token = True

    def __init__(self, user, password, remember=False):
        super().__init__({
            'login': user,
            'password': password,
            'remember': remember,
        })

    def parse(self, data):
        return data.get('token')

    @property
    def token(self):
        return self.value

    @property
    def user_id(self):
        if self._result is None:
            return None
        return self._result.get('id')


@method_cmd(BugzillaConnector, cmd='logout')
class LogOut(Method):
    """Terminate the current login session."""

    command = 'User.logout'

    def parse(self, data):
        return None


@method_cmd(BugzillaConnector, cmd='version')
class BugzillaVersion(Method):
    command = 'Bugzilla.version'

    def parse(self, data):
        return data.get('version')


@method_cmd(BugzillaConnector, cmd='get_bugs')
class GetBug(Method):
    """Retrieve bugs by ID or alias."""

    command = 'Bug.get'

    def __init__(self, ids, permissive=False):
        if isinstance(ids, (int, str)):
            ids = [ids]
        # permissive requests get an array of faults for bad bugs alongside
        # the found ones instead of directly failing out
        super().__init__({'ids': list(ids), 'permissive': permissive})
        self.raise_faults = not permissive

    def parse(self, data):
        return list(data.get('bugs', ()))

    @property
    def faults(self):
        """Fault entries for bugs that couldn't be retrieved."""
        if self._result is None:
            return []
        return list(self._result.get('faults', ()))


@method_cmd(BugzillaConnector, cmd='report_bug')
class ReportBug(Method):
    """Create a new bug from a mapping of bug fields."""

    command = 'Bug.create'
    required = ('product', 'component', 'summary', 'version')

    def __init__(self, fields=None, **kw):
        params = dict(fields) if fields is not None else {}
        params.update(kw)
        missing = [x for x in self.required if not params.get(x)]
        if missing:
            raise BzrpcError(f"missing required bug field(s): {', '.join(missing)}")
        super().__init__(params)

    def parse(self, data):
        return data.get('id')
