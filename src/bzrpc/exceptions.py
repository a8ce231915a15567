import lxml.html


class BzrpcError(Exception):
    """Generic bzrpc exceptions."""

    def __init__(self, msg, code=None, text=None):
        self.msg = str(msg)
        self.code = code
        self.text = text

    def __str__(self):
        return self.msg

    @property
    def message(self):
        if not self.text:
            return self.msg
        return f'{self.msg} -- {self.text}'


class ConnectError(BzrpcError):
    """Failed to set up a connection to a Bugzilla installation."""
    pass


class StateError(BzrpcError):
    """Connector or method used out of order."""
    pass


class ConfigError(BzrpcError):
    """Failed to parse or load config file(s)."""

    def __init__(self, msg, *, path=None, **kw):
        if path:
            msg = f'failed loading {path!r}: {msg}'
        super().__init__(msg=msg, **kw)


class RequestError(BzrpcError):
    """Generic http(s) request exceptions."""

    def __init__(self, *args, request=None, response=None, **kw):
        self.request = request
        self.response = response
        super().__init__(*args, **kw)

    @property
    def message(self):
        if not self.text or not self.text.strip():
            return self.msg
        doc = lxml.html.fromstring(self.text)
        text = doc.text_content().strip()
        return f"{self.msg} -- (see server response below)\n\n{text}"


class ParsingError(RequestError):
    """Parser failed to process the returned data."""
    pass


class AuthError(RequestError):
    """HTTP level authentication failure."""
    pass


class BugzillaError(RequestError):
    """Remote fault returned by a Bugzilla installation.

    The specific condition is carried by :attr:`kind`, a member of
    :class:`bzrpc.faults.FaultKind`.
    """

    def __init__(self, kind, msg, code=None, text=None):
        self.kind = kind
        super().__init__(msg, code=code, text=text)

    @property
    def description(self):
        return self.kind.description

    def __str__(self):
        return f'Bugzilla error: {self.description}: {self.msg}'
