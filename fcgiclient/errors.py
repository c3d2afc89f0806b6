"""Exceptions raised by the FastCGI client."""

from __future__ import annotations


class ClientError(Exception):
    """Base class of every error the client raises."""


class RequestIdNotFoundError(ClientError):
    """No request is known under the given id."""

    def __init__(self, request_id: int) -> None:
        self.id = request_id
        super().__init__(f"Response not found of request id `{request_id}`")


class ResponseNotFoundError(ClientError):
    """A record arrived for a request id other than the one awaited."""

    def __init__(self, request_id: int) -> None:
        self.id = request_id
        super().__init__(f"Response not found of request id `{request_id}`")


class UnknownRequestTypeError(ClientError):
    """A record type the client does not handle arrived in a response."""

    def __init__(self, request_type: int) -> None:
        self.request_type = request_type
        super().__init__(f"Response not found of request id `{int(request_type)}`")


class EndRequestError(ClientError):
    """The server ended the request without completing it."""

    template = "Request not complete; AppStatus: {app_status}"

    def __init__(self, app_status: int) -> None:
        self.app_status = app_status
        super().__init__(self.template.format(app_status=app_status))


class EndRequestCantMpxConnError(EndRequestError):
    """The application cannot multiplex connections."""

    template = "This app can't multiplex [CantMpxConn]; AppStatus: {app_status}"


class EndRequestOverloadedError(EndRequestError):
    """The application rejected the request because it is too busy."""

    template = "New request rejected; too busy [OVERLOADED]; AppStatus: {app_status}"


class EndRequestUnknownRoleError(EndRequestError):
    """The application does not know the requested role."""

    template = "Role value not known [UnknownRole]; AppStatus: {app_status}"


_BY_STATUS: dict[int, type[EndRequestError]] = {
    1: EndRequestCantMpxConnError,
    2: EndRequestOverloadedError,
}


def end_request_error(protocol_status: int, app_status: int) -> EndRequestError:
    """Build the error matching a protocol status that is not "request complete"."""
    error_class = _BY_STATUS.get(int(protocol_status), EndRequestUnknownRoleError)
    return error_class(app_status)