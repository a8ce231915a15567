"""HTTP transports for Bugzilla's XML-RPC interface.

API docs: https://www.bugzilla.org/docs/4.4/en/html/api/Bugzilla/WebService/Server/XMLRPC.html
"""

from http.cookiejar import DefaultCookiePolicy
import logging
from urllib.parse import urlparse, urlunparse
from xmlrpc.client import dumps, Unmarshaller, ResponseError

from lxml.etree import XMLPullParser, XMLSyntaxError
import requests
from snakeoil.klass import steal_docs

from . import __title__, __version__, const
from .exceptions import AuthError, ParsingError, RequestError

logger = logging.getLogger(__name__)


class Session(requests.Session):

    def __init__(self, verify=True, timeout=None, allow_redirects=False):
        super().__init__()
        self.verify = verify
        # responses are parsed incrementally
        self.stream = True
        self.allow_redirects = allow_redirects
        if timeout == 0:
            # set timeout to 0 to never timeout
            self.timeout = None
        else:
            self.timeout = timeout if timeout is not None else const.TIMEOUT

        self.headers['User-Agent'] = f'{__title__}-{__version__}'
        self.headers['Accept-Encoding'] = ', '.join(('gzip', 'deflate'))

    def send(self, req, **kw):
        # use session settings if not explicitly passed
        kw.setdefault('timeout', self.timeout)
        kw.setdefault('allow_redirects', self.allow_redirects)

        if not isinstance(req, requests.PreparedRequest):
            req = self.prepare_request(req)

        try:
            return super().send(req, **kw)
        except requests.exceptions.RequestException as e:
            if isinstance(e, requests.exceptions.SSLError):
                msg = 'SSL certificate verification failed'
            elif isinstance(e, requests.exceptions.ConnectionError):
                url = urlparse(req.url)
                base_url = urlunparse((
                    url.scheme,
                    url.netloc,
                    '',
                    None, None, None))
                msg = f'failed to establish connection: {base_url}'
            elif isinstance(e, requests.exceptions.Timeout):
                msg = f'request timed out (timeout: {self.timeout}s)'
            else:
                msg = str(e)
            raise RequestError(msg, request=e.request, response=e.response)


class _Unmarshaller(Unmarshaller):
    """Override to avoid decoding unicode objects.

    The lxml parser already hands over decoded strings.
    """
    dispatch = dict(Unmarshaller.dispatch)

    def end_string(self, data):
        if self._encoding and not isinstance(data, str):
            data = data.decode(self._encoding)
        self.append(data)
        self._value = 0
    dispatch["string"] = end_string
    dispatch["name"] = end_string # struct keys are always strings


class LXMLParser(object):
    """XML parser using lxml.

    The default XML parser in python based on expat has issues with badly
    formed XML. We workaround this somewhat by using lxml for parsing which
    allows recovering from certain types of broken XML.
    """

    def __init__(self, target):
        self._parser = XMLPullParser(events=('start', 'end'), recover=True)
        self._target = target

    def handle_events(self):
        for action, element in self._parser.read_events():
            if action == 'start':
                self._target.start(element.tag, element.attrib)
            elif action == 'end':
                if element.text:
                    self._target.data(element.text)
                self._target.end(element.tag)
                element.clear()

    def feed(self, data):
        self._parser.feed(data)
        self.handle_events()

    def close(self):
        self._parser.close()
        self.handle_events()


class Transport(object):
    """Send XML-RPC calls to a single endpoint over HTTP(S).

    Session cookies are never replayed by this transport, see
    :class:`CookieTransport` for installations that still depend on them.
    """

    def __init__(self, url, *, http_user=None, http_password=None,
                 verify=True, timeout=None):
        self.url = url
        self.session = Session(verify=verify, timeout=timeout)
        self.session.cookies = requests.cookies.RequestsCookieJar(
            policy=DefaultCookiePolicy(allowed_domains=[]))
        self.session.headers.update({
            'Accept': 'text/xml',
            'Content-Type': 'text/xml',
        })
        if http_user is not None:
            self.session.auth = (http_user, http_password or '')

    def __str__(self):
        return self.url

    @staticmethod
    def _encode_request(command, params):
        """Encode the data body for a request."""
        try:
            return dumps((params,), command, encoding='utf-8',
                         allow_none=True).encode('utf-8', 'xmlcharrefreplace')
        except OverflowError:
            raise RequestError('ID value exceeds XML-RPC limits')

    def request(self, command, params):
        """Call a remote method and return its decoded result.

        XML-RPC faults are raised as :class:`xmlrpc.client.Fault`.
        """
        data = self._encode_request(command, params)
        req = self.session.prepare_request(
            requests.Request(method='POST', url=self.url, data=data))
        self._init_headers(req)
        response = self.session.send(req)
        self._process_response(response)

        if response.status_code == 301:
            new = response.headers.get('Location')
            raise RequestError(
                f'service moved permanently: {self.url} -> {new}',
                request=req, response=response)

        if response.ok:
            return self.parse_response(response)
        self._failed_http_response(response)

    def _init_headers(self, request):
        """Modify the headers of a prepared request before it's sent."""

    def _process_response(self, response):
        """Inspect a raw response before it's parsed."""

    def _failed_http_response(self, response):
        if response.status_code == 401:
            raise AuthError(
                'authentication failed', code=401, text=response.text,
                response=response)
        error_str = f'HTTP Error {response.status_code}'
        reason = (response.reason or '').lower()
        if reason:
            error_str += f': {reason}'
        raise RequestError(
            error_str, text=response.text, code=response.status_code,
            request=response.request, response=response)

    def parse_response(self, response):
        """Parse the returned response."""
        if not response.headers.get('Content-Type', '').startswith('text/xml'):
            raise RequestError(
                'non-XML response from server',
                code=response.status_code, text=response.text, response=response)
        try:
            data = self._parse_xml(response)
        except (XMLSyntaxError, ResponseError) as e:
            raise ParsingError('failed parsing XML', response=response) from e
        return data[0] if data else None

    def _parse_xml(self, response):
        """Parse XML-RPC data from a streamed response."""
        u = _Unmarshaller(use_datetime=True)
        p = LXMLParser(u)
        for chunk in response.iter_content(chunk_size=64*1024):
            if chunk:
                p.feed(chunk)
        p.close()

        return u.close()

    def close(self):
        self.session.close()


class CookieTransport(Transport):
    """Transport replaying session cookies set by Bugzilla.

    Cookies are captured from the first response that sets any and are sent
    with every following request. They're never refreshed afterwards.

    Cookies are not supported by Bugzilla 4.4.3+, which relies on login
    tokens instead.
    """

    def __init__(self, *args, **kw):
        super().__init__(*args, **kw)
        self._cookies = []

    @property
    def cookies(self):
        return tuple(self._cookies)

    @steal_docs(Transport)
    def _init_headers(self, request):
        super()._init_headers(request)
        if self._cookies:
            request.headers['Cookie'] = ','.join(self._cookies)

    @steal_docs(Transport)
    def _process_response(self, response):
        super()._process_response(response)
        if not self._cookies:
            values = _set_cookie_values(response)
            if values:
                logger.debug('captured %d session cookie(s) from %s', len(values), self.url)
                self._cookies.extend(values)


def _set_cookie_values(response):
    """Return all raw Set-Cookie header values of a response."""
    headers = getattr(response.raw, 'headers', None)
    if headers is not None and hasattr(headers, 'getlist'):
        return list(headers.getlist('Set-Cookie'))
    value = response.headers.get('Set-Cookie')
    return [value] if value else []
