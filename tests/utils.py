from xmlrpc.client import dumps, loads, Fault

import responses

from bzrpc.methods import Method

BASE = 'http://example.com/bugzilla'
URL = f'{BASE}/xmlrpc.cgi'


class Echo(Method):
    """Plain method for a made up remote command."""

    command = 'Test.echo'


class FakeBugzilla(object):
    """Canned XML-RPC responses for a single Bugzilla endpoint."""

    def __init__(self, rsps, url=URL):
        self.rsps = rsps
        self.url = url

    def result(self, result, **kw):
        kw.setdefault('content_type', 'text/xml')
        body = dumps((result,), methodresponse=True, allow_none=True)
        self.rsps.add(responses.POST, self.url, body=body, **kw)

    def fault(self, code, msg):
        body = dumps(Fault(code, msg), methodresponse=True)
        self.rsps.add(responses.POST, self.url, body=body, content_type='text/xml')

    def raw(self, body, **kw):
        self.rsps.add(responses.POST, self.url, body=body, **kw)

    @property
    def calls(self):
        """Sent (method name, params mapping) pairs."""
        sent = []
        for call in self.rsps.calls:
            params, method = loads(call.request.body)
            sent.append((method, params[0]))
        return sent

    @property
    def requests(self):
        return [call.request for call in self.rsps.calls]
