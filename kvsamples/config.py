from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional

from .errors import ConfigError


class ProbeOutcome(str, Enum):
    NOT_FOUND = "not_found"
    OTHER = "other"


class SkuName(str, Enum):
    STANDARD = "standard"
    PREMIUM = "premium"


class CreateMode(str, Enum):
    DEFAULT = "default"
    RECOVER = "recover"


@dataclass(frozen=True)
class PollConfig:
    max_attempts: int = 15
    retry_delay: float = 3.0  # seconds, applied between probe attempts only

    def __post_init__(self) -> None:
        if self.max_attempts < 0:
            raise ValueError(f"max_attempts must be >= 0, got {self.max_attempts}")
        if self.retry_delay < 0:
            raise ValueError(f"retry_delay must be >= 0, got {self.retry_delay}")


REQUIRED_ENV_VARS = (
    "AZURE_SUBSCRIPTION_ID",
    "AZURE_TENANT_ID",
    "AZURE_CLIENT_ID",
    "AZURE_CLIENT_OID",
    "AZURE_CLIENT_SECRET",
)


@dataclass(frozen=True)
class SampleConfig:
    subscription_id: str
    tenant_id: str
    client_id: str
    client_object_id: str
    client_secret: str = field(repr=False)
    location: str = "westus"
    group_name: str = "azure-sample-group"
    poll: PollConfig = field(default_factory=PollConfig)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SampleConfig":
        """Build a config from environment variables.

        Every missing required variable is reported in a single ConfigError.
        """
        env = os.environ if environ is None else environ

        missing = [name for name in REQUIRED_ENV_VARS if not env.get(name)]
        if missing:
            raise ConfigError(
                f"please set/export the following environment variables: {','.join(missing)}"
            )

        try:
            poll = PollConfig(
                max_attempts=int(env.get("KV_POLL_MAX_ATTEMPTS", PollConfig.max_attempts)),
                retry_delay=float(env.get("KV_POLL_RETRY_DELAY", PollConfig.retry_delay)),
            )
        except ValueError as exc:
            raise ConfigError(f"Invalid polling configuration: {exc}") from exc

        return cls(
            subscription_id=env["AZURE_SUBSCRIPTION_ID"],
            tenant_id=env["AZURE_TENANT_ID"],
            client_id=env["AZURE_CLIENT_ID"],
            client_object_id=env["AZURE_CLIENT_OID"],
            client_secret=env["AZURE_CLIENT_SECRET"],
            location=env.get("AZURE_LOCATION") or "westus",
            group_name=env.get("AZURE_RESOURCE_GROUP") or "azure-sample-group",
            poll=poll,
        )


# Access policy permission sets granted to the sample principal on every vault.
KEY_PERMISSIONS = (
    "encrypt",
    "decrypt",
    "wrapKey",
    "unwrapKey",
    "sign",
    "verify",
    "get",
    "list",
    "create",
    "update",
    "import",
    "delete",
    "backup",
    "restore",
    "recover",
    "purge",
)

SECRET_PERMISSIONS = (
    "get",
    "list",
    "set",
    "delete",
    "backup",
    "restore",
    "recover",
    "purge",
)

CERTIFICATE_PERMISSIONS = (
    "get",
    "list",
    "delete",
    "create",
    "import",
    "update",
    "managecontacts",
    "getissuers",
    "listissuers",
    "setissuers",
    "deleteissuers",
    "manageissuers",
    "recover",
    "purge",
    "backup",
    "restore",
)

STORAGE_PERMISSIONS = (
    "get",
    "list",
    "delete",
    "set",
    "update",
    "regeneratekey",
    "recover",
    "purge",
    "backup",
    "restore",
    "setsas",
    "listsas",
    "getsas",
    "deletesas",
)
