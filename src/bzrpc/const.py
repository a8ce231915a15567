import os

from . import __title__

# fixed XML-RPC entry point of every Bugzilla installation
ENTRY_POINT = 'xmlrpc.cgi'

# reserved parameter key carrying the session token
TOKEN_KEY = 'Bugzilla_token'

# default request timeout in seconds
TIMEOUT = 30

SYSTEM_CONFIG_PATH = os.path.join('/etc', __title__)
USER_CONFIG_PATH = os.environ.get(
    'XDG_CONFIG_HOME', os.path.expanduser('~/.config'))
USER_CONFIG_PATH = os.path.join(USER_CONFIG_PATH, __title__)
CONFIG_FILE = f'{__title__}.conf'
