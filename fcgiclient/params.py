"""FastCGI request parameters."""

from __future__ import annotations

_U16_MAX = 0xFFFF


class Params(dict):
    """Mapping of FastCGI parameter names to values, with chainable setters."""

    @classmethod
    def default(cls) -> Params:
        """Parameters every request starts from."""
        return (
            cls()
            .gateway_interface("FastCGI/1.0")
            .server_software("fcgiclient")
            .server_protocol("HTTP/1.1")
        )

    def _set(self, name: str, value: str) -> Params:
        self[name] = value
        return self

    def gateway_interface(self, value: str) -> Params:
        return self._set("GATEWAY_INTERFACE", value)

    def server_software(self, value: str) -> Params:
        return self._set("SERVER_SOFTWARE", value)

    def server_protocol(self, value: str) -> Params:
        return self._set("SERVER_PROTOCOL", value)

    def request_method(self, value: str) -> Params:
        return self._set("REQUEST_METHOD", value)

    def script_filename(self, value: str) -> Params:
        return self._set("SCRIPT_FILENAME", value)

    def script_name(self, value: str) -> Params:
        return self._set("SCRIPT_NAME", value)

    def query_string(self, value: str) -> Params:
        return self._set("QUERY_STRING", value)

    def request_uri(self, value: str) -> Params:
        return self._set("REQUEST_URI", value)

    def document_root(self, value: str) -> Params:
        return self._set("DOCUMENT_ROOT", value)

    def document_uri(self, value: str) -> Params:
        return self._set("DOCUMENT_URI", value)

    def remote_addr(self, value: str) -> Params:
        return self._set("REMOTE_ADDR", value)

    def remote_port(self, value: int) -> Params:
        return self._set("REMOTE_PORT", _port(value))

    def server_addr(self, value: str) -> Params:
        return self._set("SERVER_ADDR", value)

    def server_port(self, value: int) -> Params:
        return self._set("SERVER_PORT", _port(value))

    def server_name(self, value: str) -> Params:
        return self._set("SERVER_NAME", value)

    def content_type(self, value: str) -> Params:
        return self._set("CONTENT_TYPE", value)

    def content_length(self, value: int) -> Params:
        if value < 0:
            raise ValueError(f"content length must not be negative: {value}")
        return self._set("CONTENT_LENGTH", str(value))

    def copy(self) -> Params:
        return Params(self)


def _port(value: int) -> str:
    if not 0 <= value <= _U16_MAX:
        raise ValueError(f"port out of range: {value}")
    return str(value)