import configparser
import os

from snakeoil import klass
from snakeoil.mappings import ImmutableDict

from . import const
from .exceptions import ConfigError

# option name -> converter name of configparser's typed getters
_CONVERTERS = {
    'timeout': 'getint',
    'verify': 'getboolean',
    'cookies': 'getboolean',
}


class Config(object):
    """Named Bugzilla connections loaded from INI style config files.

    System and user config files are loaded if they exist, an explicitly
    passed path has to exist. Later files override earlier ones.
    """

    def __init__(self, path=None, config=None):
        self._config = config if config is not None else configparser.ConfigParser()

        paths = [
            (os.path.join(const.SYSTEM_CONFIG_PATH, const.CONFIG_FILE), False),
            (os.path.join(const.USER_CONFIG_PATH, const.CONFIG_FILE), False),
        ]
        if path:
            paths.append((path, True))

        for p, force in paths:
            self.load(p, force=force)

    def load(self, path, force=True):
        try:
            if force:
                with open(path) as f:
                    self._config.read_file(f)
            else:
                self._config.read(path)
        except IOError as e:
            raise ConfigError(e.strerror, path=e.filename)
        except configparser.Error as e:
            raise ConfigError(str(e), path=path)

    @klass.jit_attr
    def default_connection(self):
        return self._config.defaults().get('connection', None)

    def opts(self, connection=None):
        """Return the typed settings of a connection."""
        if connection is None:
            connection = self.default_connection
        if connection is None:
            raise ConfigError('no connection specified and no default connection set')
        if not self._config.has_section(connection):
            raise ConfigError(f'unknown connection: {connection!r}')

        section = self._config[connection]
        opts = {}
        for key in section:
            if key == 'connection':
                continue
            getter = getattr(section, _CONVERTERS.get(key, 'get'))
            try:
                opts[key] = getter(key)
            except ValueError as e:
                raise ConfigError(f'invalid {key!r} setting for {connection!r}: {e}')
        if not opts.get('base'):
            raise ConfigError(f'connection {connection!r} is missing a base URL')
        return ImmutableDict(opts)

    def __getitem__(self, key):
        return self._config[key]

    # proxied ConfigParser methods

    def has_section(self, name):
        return self._config.has_section(name)

    def sections(self):
        return self._config.sections()
