"""In-memory stand-ins for the async Azure Key Vault clients used in unit tests.

Deleted and recovered resources can be given a propagation ``lag``: the
number of reads that still answer 404 after the mutation, which is how the
real service's eventual consistency shows up.
"""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any


class FakeNotFound(Exception):
    status_code = 404


class FakeForbidden(Exception):
    status_code = 403


class FakeSleep:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


async def _aiter(items):
    for item in items:
        yield item


class FakeLROPoller:
    def __init__(self, result: Any):
        self._result = result

    async def result(self) -> Any:
        return self._result


class _Lagging:
    """Counts down reads that should still report not-found."""

    def __init__(self):
        self.pending: dict[str, int] = {}

    def check(self, name: str) -> None:
        remaining = self.pending.get(name, 0)
        if remaining > 0:
            self.pending[name] = remaining - 1
            raise FakeNotFound(name)


class FakeVaultsOperations:
    def __init__(self, location: str = "westus", lag: int = 0):
        self.location = location
        self.lag = lag
        self.live: dict[str, SimpleNamespace] = {}
        self.deleted: dict[str, SimpleNamespace] = {}
        self.hidden_from_listing: set[str] = set()
        self.calls: list[tuple] = []
        self._deleted_lag = _Lagging()

    def add_vault(self, name: str, *, enable_soft_delete: Any = None) -> SimpleNamespace:
        vault = SimpleNamespace(
            name=name,
            location=self.location,
            properties=SimpleNamespace(
                vault_uri=f"https://{name}.vault.azure.net/",
                enable_soft_delete=enable_soft_delete,
                location=self.location,
            ),
        )
        self.live[name] = vault
        return vault

    async def begin_create_or_update(self, group_name: str, vault_name: str, parameters: dict):
        self.calls.append(("begin_create_or_update", group_name, vault_name, parameters))
        properties = parameters["properties"]
        if properties.get("createMode") == "recover":
            self.deleted.pop(vault_name)
        vault = self.add_vault(vault_name, enable_soft_delete=properties.get("enableSoftDelete"))
        return FakeLROPoller(vault)

    async def update(self, group_name: str, vault_name: str, parameters: dict):
        self.calls.append(("update", group_name, vault_name, parameters))
        vault = self.live[vault_name]
        vault.properties.enable_soft_delete = parameters["properties"]["enableSoftDelete"]
        return vault

    async def delete(self, group_name: str, vault_name: str) -> None:
        self.calls.append(("delete", group_name, vault_name))
        vault = self.live.pop(vault_name)
        self.deleted[vault_name] = SimpleNamespace(
            name=vault_name,
            properties=SimpleNamespace(location=vault.location),
        )
        self._deleted_lag.pending[vault_name] = self.lag

    async def get_deleted(self, vault_name: str, location: str):
        self.calls.append(("get_deleted", vault_name, location))
        if vault_name not in self.deleted:
            raise FakeNotFound(vault_name)
        self._deleted_lag.check(vault_name)
        return self.deleted[vault_name]

    async def begin_purge_deleted(self, vault_name: str, location: str):
        self.calls.append(("begin_purge_deleted", vault_name, location))
        self.deleted.pop(vault_name)
        return FakeLROPoller(None)

    def list(self):
        return _aiter(list(self.live.values()))

    def list_deleted(self):
        visible = [v for name, v in self.deleted.items() if name not in self.hidden_from_listing]
        return _aiter(visible)

    def count(self, op: str) -> int:
        return sum(1 for call in self.calls if call[0] == op)


class FakeKeyVaultManagementClient:
    def __init__(self, **kwargs: Any):
        self.vaults = FakeVaultsOperations(**kwargs)


class FakeResourceGroups:
    def __init__(self):
        self.calls: list[tuple[str, dict]] = []

    async def create_or_update(self, name: str, parameters: dict):
        self.calls.append((name, parameters))
        return SimpleNamespace(name=name, location=parameters["location"])


class _ClientBase:
    def __init__(self, vault_url: str):
        self.vault_url = vault_url
        self.closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        self.closed = True

    def _item(self, name: str, **extra: Any) -> SimpleNamespace:
        return SimpleNamespace(name=name, id=f"{self.vault_url}{self.kind}/{name}", **extra)


class FakeSecretClient(_ClientBase):
    kind = "secrets"

    def __init__(self, vault_url: str, lag: int = 0):
        super().__init__(vault_url)
        self.lag = lag
        self.secrets: dict[str, SimpleNamespace] = {}
        self.deleted: dict[str, SimpleNamespace] = {}
        self.calls: list[tuple[str, str]] = []
        self._deleted_lag = _Lagging()
        self._recovered_lag = _Lagging()

    async def set_secret(self, name: str, value: str):
        self.calls.append(("set_secret", name))
        secret = self._item(name, value=value)
        self.secrets[name] = secret
        return secret

    async def get_secret(self, name: str):
        self.calls.append(("get_secret", name))
        if name not in self.secrets:
            raise FakeNotFound(name)
        self._recovered_lag.check(name)
        return self.secrets[name]

    async def delete_secret(self, name: str):
        self.calls.append(("delete_secret", name))
        self.deleted[name] = self.secrets.pop(name)
        self._deleted_lag.pending[name] = self.lag
        return self.deleted[name]

    async def get_deleted_secret(self, name: str):
        self.calls.append(("get_deleted_secret", name))
        if name not in self.deleted:
            raise FakeNotFound(name)
        self._deleted_lag.check(name)
        return self.deleted[name]

    async def recover_deleted_secret(self, name: str):
        self.calls.append(("recover_deleted_secret", name))
        self.secrets[name] = self.deleted.pop(name)
        self._recovered_lag.pending[name] = self.lag
        return self.secrets[name]

    async def purge_deleted_secret(self, name: str) -> None:
        self.calls.append(("purge_deleted_secret", name))
        self.deleted.pop(name)

    def list_properties_of_secrets(self):
        return _aiter(list(self.secrets.values()))

    def list_deleted_secrets(self):
        return _aiter(list(self.deleted.values()))

    async def backup_secret(self, name: str) -> bytes:
        return f"backup:{name}".encode()

    async def restore_secret_backup(self, backup: bytes):
        name = backup.decode().split(":", 1)[1]
        return await self.set_secret(name, "restored")


class FakeKeyClient(_ClientBase):
    kind = "keys"

    def __init__(self, vault_url: str):
        super().__init__(vault_url)
        self.keys: dict[str, SimpleNamespace] = {}

    async def create_rsa_key(self, name: str):
        self.keys[name] = self._item(name, key_type="RSA")
        return self.keys[name]

    async def backup_key(self, name: str) -> bytes:
        return f"backup:{name}".encode()

    async def restore_key_backup(self, backup: bytes):
        name = backup.decode().split(":", 1)[1]
        return await self.create_rsa_key(name)

    def list_properties_of_keys(self):
        return _aiter(list(self.keys.values()))


class FakeCertificateClient(_ClientBase):
    kind = "certificates"

    def __init__(self, vault_url: str):
        super().__init__(vault_url)
        self.certificates: dict[str, SimpleNamespace] = {}

    async def create_certificate(self, certificate_name: str, policy: Any):
        self.certificates[certificate_name] = self._item(certificate_name, policy=policy)
        return self.certificates[certificate_name]

    async def backup_certificate(self, name: str) -> bytes:
        return f"backup:{name}".encode()

    async def restore_certificate_backup(self, backup: bytes):
        name = backup.decode().split(":", 1)[1]
        return await self.create_certificate(name, policy=None)

    def list_properties_of_certificates(self):
        return _aiter(list(self.certificates.values()))


class ClientRegistry:
    """Hands out one fake data-plane client per vault URL."""

    def __init__(self, client_cls, **kwargs: Any):
        self._client_cls = client_cls
        self._kwargs = kwargs
        self.clients: dict[str, Any] = {}

    def __call__(self, vault_url: str):
        if vault_url not in self.clients:
            self.clients[vault_url] = self._client_cls(vault_url, **self._kwargs)
        return self.clients[vault_url]
