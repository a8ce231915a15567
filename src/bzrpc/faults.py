"""Translate Bugzilla web service faults into typed errors.

Bugzilla web service error codes and their descriptions can be found at:
https://github.com/bugzilla/bugzilla/blob/5.0/Bugzilla/WebService/Constants.pm#L56
"""

from enum import Enum

from snakeoil.mappings import ImmutableDict

from .exceptions import BugzillaError


class FaultKind(Enum):
    """Known classes of Bugzilla faults."""

    INVALID_LOGIN = 'invalid username or password'
    ACCOUNT_DISABLED = 'account disabled'
    LOGIN_REQUIRED = 'login required'
    INVALID_TOKEN = 'invalid or expired login token'
    PERMISSION_DENIED = 'permission denied'
    OBJECT_NOT_FOUND = 'object does not exist'
    INVALID_BUG_ID = 'invalid bug ID'
    BUG_NOT_FOUND = 'bug does not exist'
    INVALID_ALIAS = 'invalid bug alias'
    INVALID_FIELD = 'invalid field'
    INVALID_VALUE = 'invalid parameter value'
    PARAM_REQUIRED = 'required parameter missing'
    PRODUCT_NOT_FOUND = 'product does not exist'
    COMPONENT_NOT_FOUND = 'component does not exist'
    ILLEGAL_CHANGE = 'illegal change'
    UNKNOWN = 'unknown error'

    @property
    def description(self):
        return self.value


# fallback error code for unmapped errors, negative is fatal and positive is
# transient
GENERIC_FAULT = 32000

FAULT_CODES = ImmutableDict({
    50: FaultKind.PARAM_REQUIRED,
    51: FaultKind.OBJECT_NOT_FOUND,
    52: FaultKind.INVALID_VALUE,
    100: FaultKind.INVALID_BUG_ID,
    101: FaultKind.BUG_NOT_FOUND,
    102: FaultKind.PERMISSION_DENIED,
    103: FaultKind.INVALID_ALIAS,
    104: FaultKind.INVALID_FIELD,
    106: FaultKind.PERMISSION_DENIED,
    108: FaultKind.INVALID_FIELD,
    115: FaultKind.ILLEGAL_CHANGE,
    300: FaultKind.INVALID_LOGIN,
    301: FaultKind.ACCOUNT_DISABLED,
    410: FaultKind.LOGIN_REQUIRED,
    500: FaultKind.PRODUCT_NOT_FOUND,
})


def register_fault(code, kind, table=FAULT_CODES):
    """Return a copy of a fault table with an extra code mapping."""
    if not isinstance(kind, FaultKind):
        raise TypeError(f'invalid fault kind: {kind!r}')
    return ImmutableDict({**table, code: kind})


def translate_fault(code, msg, table=FAULT_CODES):
    """Map a fault code and message to a :class:`BugzillaError`.

    Unknown codes fall back to :attr:`FaultKind.UNKNOWN`, keeping the
    original message.
    """
    msg = str(msg)
    lowered = msg.lower()
    if code == GENERIC_FAULT:
        if 'token' in lowered or 'cookie' in lowered or 'expired' in lowered:
            kind = FaultKind.INVALID_TOKEN
        else:
            kind = FaultKind.UNKNOWN
    else:
        kind = table.get(code, FaultKind.UNKNOWN)
        # 51 covers every missing object type
        if kind is FaultKind.OBJECT_NOT_FOUND and 'component' in lowered:
            kind = FaultKind.COMPONENT_NOT_FOUND
    return BugzillaError(kind, msg, code=code)


def from_fault(fault, table=FAULT_CODES):
    """Convert an :class:`xmlrpc.client.Fault` to a :class:`BugzillaError`."""
    return translate_fault(fault.faultCode, fault.faultString, table=table)
