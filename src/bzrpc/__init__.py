__title__ = 'bzrpc'
__version__ = '0.1.0'

from .connector import BugzillaConnector
from .exceptions import BzrpcError
from .faults import FaultKind
from . import methods


def get_connector(connection=None, path=None, **kw):
    """Return a connected, and if credentials are configured logged in, connector."""
    return BugzillaConnector.from_config(connection, path=path, **kw)
