"""Azure Key Vault samples built around an eventual-consistency poller.

The core is small and SDK-free:

    from kvsamples.polling import perform_op_and_wait_for_completion, Poller

The Azure-facing pieces (client factories, vault lifecycle helpers and the
runnable samples) import the Azure SDK lazily, so you only need the
packages for what you use.
"""

from . import clients, naming, polling, vaults  # noqa: F401
from .config import (  # re-export for convenience
    PollConfig,
    ProbeOutcome,
    SampleConfig,
)
from .errors import (
    Cancelled,
    ConfigError,
    KvSamplesError,
    MissingDriverError,
    OperationFailed,
    PollingError,
    ProbeFailed,
    RetryBudgetExceeded,
    SampleError,
    TransientNotFound,
)
from .polling import Poller, perform_op_and_wait_for_completion, poll_while_not_found

__all__ = [
    # Submodules
    "clients",
    "naming",
    "polling",
    "vaults",
    # Config / enums
    "PollConfig",
    "ProbeOutcome",
    "SampleConfig",
    # Polling
    "Poller",
    "perform_op_and_wait_for_completion",
    "poll_while_not_found",
    # Errors
    "KvSamplesError",
    "MissingDriverError",
    "ConfigError",
    "SampleError",
    "PollingError",
    "OperationFailed",
    "TransientNotFound",
    "ProbeFailed",
    "RetryBudgetExceeded",
    "Cancelled",
]
