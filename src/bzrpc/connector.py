from collections.abc import Mapping
import logging
import threading
from urllib.parse import urlparse, ParseResult, SplitResult
from xmlrpc.client import Fault

from snakeoil.mappings import ImmutableDict

from . import const
from .config import Config
from .exceptions import ConnectError, ParsingError, StateError
from .faults import FAULT_CODES, from_fault, translate_fault
from .transport import Transport, CookieTransport

logger = logging.getLogger(__name__)


def method_cmd(connector_cls, cmd):
    """Register a method class as a convenience call on a connector class.

    The registered call executes a new method instance and returns its
    parsed value.
    """
    def wrapped(cls):
        def send_func(self, *args, **kw):
            return self.execute_method(cls(*args, **kw)).value
        send_func.__name__ = cmd
        send_func.__doc__ = cls.__doc__
        setattr(connector_cls, cmd, send_func)
        return cls
    return wrapped


def normalize_host(host):
    """Force a host string to target the XML-RPC entry point."""
    if not host.endswith(const.ENTRY_POINT):
        if host.endswith('/'):
            host += const.ENTRY_POINT
        else:
            host += '/' + const.ENTRY_POINT
    return host


def _validate_url(url):
    """Return the string form of a parsed URL if it's usable, otherwise raise ValueError."""
    if url.scheme not in ('http', 'https'):
        raise ValueError(f'unsupported scheme: {url.scheme!r}')
    if not url.hostname:
        raise ValueError('missing host')
    if any(c.isspace() for c in url.netloc):
        raise ValueError('whitespace in host')
    # raises ValueError on out of range or non-numeric ports
    url.port
    return url.geturl()


class BugzillaConnector(object):
    """Handle all access to a given Bugzilla installation.

    A host must be designated with :meth:`connect_to` before any method is
    executed. Tokens issued by login methods are stored and sent along with
    every following call.

    Calls on a single connector are serialized, use separate connectors for
    parallel sessions.
    """

    def __init__(self, *, cookies=True, verify=True, timeout=None, fault_table=FAULT_CODES):
        self.transport_cls = CookieTransport if cookies else Transport
        self.verify = verify
        self.timeout = timeout
        self.fault_table = fault_table
        self.transport = None
        self._token = None
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, connection=None, path=None, authenticate=True, **kw):
        """Create a connector for a configured connection and connect it.

        Keyword arguments override configured settings. If both user and
        password are set the connector is logged in as well.
        """
        from .methods import LogIn
        opts = dict(Config(path=path).opts(connection))
        opts.update((k, v) for k, v in kw.items() if v is not None)
        connector = cls(
            cookies=opts.get('cookies', True), verify=opts.get('verify', True),
            timeout=opts.get('timeout'))
        connector.connect_to(
            opts['base'], http_user=opts.get('http_user'),
            http_password=opts.get('http_password'))

        user, password = opts.get('user'), opts.get('password')
        if authenticate and user is not None and password is not None:
            try:
                connector.execute_method(LogIn(user, password))
            except Exception:
                connector.close()
                raise
        return connector

    def __str__(self):
        return self.url or f'{self.__class__.__name__} (unconfigured)'

    @property
    def connected(self):
        return self.transport is not None

    @property
    def url(self):
        return self.transport.url if self.transport is not None else None

    @property
    def token(self):
        return self._token

    def set_token(self, token):
        """Replace the session token sent with each call, None drops it."""
        self._token = token

    def connect_to(self, host, http_user=None, http_password=None):
        """Designate the Bugzilla installation to connect to.

        String hosts point at the root of an installation and are extended
        to target its XML-RPC entry point, already parsed URLs are used as
        is. Optional HTTP basic auth credentials aren't used to log in to
        Bugzilla itself, see :class:`bzrpc.methods.LogIn` for that.

        Returns the URL of the entry point.
        """
        if isinstance(host, (ParseResult, SplitResult)):
            url = host
        else:
            host = normalize_host(str(host))
            try:
                url = urlparse(host)
            except ValueError as e:
                raise ConnectError(f'host URL is malformed; URL supplied was {host}: {e}')
        try:
            url = _validate_url(url)
        except ValueError as e:
            raise ConnectError(f'host URL is malformed; URL supplied was {url.geturl()}: {e}')

        transport = self.transport_cls(
            url, http_user=http_user, http_password=http_password,
            verify=self.verify, timeout=self.timeout)
        with self._lock:
            if self.transport is not None:
                self.transport.close()
            self.transport = transport
        logger.debug('connecting to %s', url)
        return url

    def execute_method(self, method):
        """Execute a method on the connected installation.

        On success the read-only result mapping is handed to the method
        which is then returned. Remote faults are raised as
        :class:`bzrpc.exceptions.BugzillaError`.
        """
        with self._lock:
            if self.transport is None:
                raise StateError('cannot execute a method without connecting')
            if not method.method_name:
                raise StateError(f'{method!r} has no remote command')
            if method.executed:
                raise StateError(f'{method!r} was already executed')

            params = {}
            if self._token is not None:
                params[const.TOKEN_KEY] = self._token
            params.update(method.encode_params())

            logger.debug(
                'executing %s on %s (token: %s)', method.method_name, self.url,
                'set' if const.TOKEN_KEY in params else 'unset')
            try:
                result = self.transport.request(method.method_name, params)
            except Fault as e:
                error = from_fault(e, table=self.fault_table)
                logger.warning('%s failed: %s', method.method_name, error)
                raise error from None

            if not isinstance(result, Mapping):
                result = {}
            faults = result.get('faults')
            if faults and method.raise_faults:
                fault = faults[0]
                if not isinstance(fault, Mapping):
                    raise ParsingError(f'{method.method_name}: malformed fault entry: {fault!r}')
                error = translate_fault(
                    fault.get('faultCode'), fault.get('faultString', ''),
                    table=self.fault_table)
                logger.warning('%s failed: %s', method.method_name, error)
                raise error

            method.set_result(ImmutableDict(result))
            if method.issues_token:
                self._token = method.token
                logger.debug('stored session token from %s', method.method_name)
        return method

    def close(self):
        if self.transport is not None:
            self.transport.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
