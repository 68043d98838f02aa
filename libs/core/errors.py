from __future__ import annotations

from typing import Optional


class GatewayError(Exception):
    error_code = "runtime.tool_error"

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class InputValidationError(GatewayError):
    error_code = "contract.input_invalid"


class UnknownToolError(GatewayError):
    error_code = "contract.tool_not_found"

    def __init__(self, tool_name: str) -> None:
        super().__init__(f"unknown_tool:{tool_name}")
        self.tool_name = tool_name


class TransportError(GatewayError):
    error_code = "runtime.transport_error"


class CoreTimeoutError(TransportError, TimeoutError):
    error_code = "runtime.timeout"


class CoreError(GatewayError):
    """Non-2xx answer from Core. The message format is fixed: ``Core <status>: <message>``."""

    error_code = "runtime.http_error"

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"Core {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class SerializationError(GatewayError):
    error_code = "contract.output_invalid"

    def __init__(self, detail: str, status_code: Optional[int] = None) -> None:
        super().__init__(detail)
        self.status_code = status_code
