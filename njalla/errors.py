'''
**njalla.errors**
-------------

The exception types raised by the client. Every error derives from
`NjallaError` so callers can catch the whole family at once, nothing
is retried internally.
'''


class NjallaError(Exception):
    '''
    Base class for all errors raised by the client.
    '''


class TransportError(NjallaError):
    '''
    Raised when the request never produced a response (network/TLS failure).

    Parent: NjallaError
    '''


class AuthenticationError(NjallaError):
    '''
    Parent: NjallaError
    '''


class TokenNotFoundError(AuthenticationError):
    '''
    Raised when the sign-in page does not carry the CSRF token input.

    Parent: AuthenticationError
    '''


class AuthenticationFailedError(AuthenticationError):
    '''
    Raised when the sign-in form submission is not answered with a 200.

    Parent: AuthenticationError
    '''

    def __init__(self, status: int) -> None:
        super().__init__(f'Login failed with status code {status}')
        self.status = status


class NotLoggedInError(NjallaError):
    '''
    Raised when a privileged call is made without a token in the cookie store.

    Parent: NjallaError
    '''


class ExtractionError(NjallaError):
    '''
    Raised when an expected element or script marker is missing from a page.

    Parent: NjallaError
    '''


class DecodeError(NjallaError, ValueError):
    '''
    Raised when the records blob is not valid JSON or a record cannot be decoded.

    Parent: NjallaError, ValueError
    '''


class MissingTypeFieldError(DecodeError):
    '''
    Parent: DecodeError
    '''

    def __init__(self, index: int) -> None:
        super().__init__(f'Record at index {index} has no string "type" field')
        self.index = index


class UnknownRecordTypeError(DecodeError):
    '''
    Parent: DecodeError
    '''

    def __init__(self, name: str) -> None:
        super().__init__(f'Unknown record type: {name}')
        self.name = name


class InvalidRecordFieldError(DecodeError):
    '''
    Raised when a required field is missing or holds a value of the wrong type.

    Parent: DecodeError
    '''

    def __init__(self, index: int, key: str, reason: str) -> None:
        super().__init__(f'Record at index {index}: field "{key}" {reason}')
        self.index = index
        self.key = key


class ValidationError(NjallaError, ValueError):
    '''
    Raised when a record field is outside the values the provider accepts.

    Parent: NjallaError, ValueError
    '''


class RequestFailedError(NjallaError):
    '''
    Raised when a mutating POST is not answered with a 200.

    Parent: NjallaError
    '''

    def __init__(self, action: str, status: int) -> None:
        super().__init__(f'{action} failed with status code {status}')
        self.action = action
        self.status = status


class RecordNotFoundError(NjallaError, KeyError):
    '''
    Raised when an update or removal targets an ID absent from the zone.

    Parent: NjallaError, KeyError
    '''

    def __init__(self, domain: str | None, record_id: int) -> None:
        super().__init__(f'No record with id {record_id} in {domain or "zone"}')
        self.domain = domain
        self.record_id = record_id

    def __str__(self) -> str:
        return str(self.args[0])
