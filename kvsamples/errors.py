from __future__ import annotations

"""Shared error types for the kvsamples package.

Callers can catch these without depending on Azure SDK exception classes
directly. Poller failures all derive from ``PollingError`` so a caller can
tell "never converged in time" (``RetryBudgetExceeded``) apart from a real
failure of the operation or probe.
"""

from typing import Optional


class KvSamplesError(Exception):
    """Base class for all package-specific exceptions."""


class MissingDriverError(ImportError, KvSamplesError):
    """Raised when an optional Azure SDK package is not installed.

    Examples include azure-identity, azure-keyvault-secrets,
    azure-mgmt-keyvault, etc.
    """
    pass


class ConfigError(KvSamplesError):
    """Raised when required configuration is missing or invalid."""


class SampleError(KvSamplesError):
    """Raised when a sample flow observes an unexpected service state."""


class PollingError(KvSamplesError):
    """Base class for failures raised by the eventual-consistency poller."""


class OperationFailed(PollingError):
    """The mutating operation failed. It is never retried."""

    def __init__(self, error: BaseException):
        super().__init__(f"Operation failed: {error!r}")
        self.error = error


class TransientNotFound(PollingError):
    """The probed resource is not (yet) in the expected state.

    Probes may raise this directly to request another attempt.
    """


class ProbeFailed(PollingError):
    """The probe failed for a reason other than not-found."""

    def __init__(self, error: BaseException, attempt: int):
        super().__init__(f"Probe failed on attempt {attempt}: {error!r}")
        self.error = error
        self.attempt = attempt


class RetryBudgetExceeded(PollingError):
    def __init__(self, attempts: int, last_error: Optional[BaseException] = None):
        super().__init__(f"Retry count exceeded after {attempts} probe attempt(s)")
        self.attempts = attempts
        self.last_error = last_error


class Cancelled(PollingError):
    def __init__(self, attempts: int):
        super().__init__(f"Polling cancelled after {attempts} probe attempt(s)")
        self.attempts = attempts
