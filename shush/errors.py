class ShushError(Exception):
    """Base class for every failure that ends a shush invocation."""


class DecodeFailure(ShushError, ValueError):
    """Ciphertext token is not valid base64 for the selected padding mode."""


class RemoteFailure(ShushError, RuntimeError):
    """KMS call failed or returned an unusable response."""

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.code = code


class MissingPayload(RemoteFailure):
    """KMS call succeeded but the response carried no payload."""


class ProcessSpawnFailure(ShushError, OSError):
    """Target command of `exec` could not be launched."""


class SubstitutionError(ShushError):
    """An encrypted environment variable could not be substituted."""

    def __init__(self, variable: str, message: str):
        super().__init__(message)
        self.variable = variable


class InputError(ShushError, ValueError):
    """User supplied text could not be read or encoded."""
