from __future__ import annotations


class HookError(Exception):
    """A failure that ends the request with a known status and error code."""

    status_code: int = 500
    code: str = "unexpected_failure"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidPayloadError(HookError):
    status_code = 400
    code = "invalid_payload"


class SignatureVerificationError(HookError):
    status_code = 401
    code = "invalid_signature"
