from __future__ import annotations

"""Soft-delete recovery sample: enumerate, recover and purge deleted vaults and secrets.

Run with ``python -m kvsamples.soft_delete`` after exporting the variables
listed in ``kvsamples.config.REQUIRED_ENV_VARS`` (a ``.env`` file works too).
"""

import asyncio
import logging
import sys
from typing import Any, Callable, List, Optional

from dotenv import load_dotenv

from . import vaults
from .clients import (
    classify_azure_error,
    create_credential,
    create_keyvault_management_client,
    create_resource_management_client,
    create_secret_client,
)
from .config import SampleConfig
from .errors import SampleError
from .naming import NameGenerator
from .polling import Poller

logger = logging.getLogger(__name__)

SecretClientFactory = Callable[[str], Any]


class SoftDeleteRecoverySample:
    def __init__(
        self,
        config: SampleConfig,
        *,
        mgmt_client: Any,
        secret_client_factory: SecretClientFactory,
        names: Optional[NameGenerator] = None,
        poller: Optional[Poller] = None,
    ):
        self.config = config
        self.mgmt_client = mgmt_client
        self._secret_client_factory = secret_client_factory
        self.names = names or NameGenerator()
        self.poller = poller or Poller(config.poll, classify=classify_azure_error, cancel_event=asyncio.Event())

        self.vault_to_recover: Any = None
        self.vault_to_purge: Any = None
        self.secrets_recovery_vault: Any = None

    async def run(self) -> None:
        await self.precreate_vaults()
        await self.deleted_vault_recovery()
        await self.deleted_secret_recovery()
        await self.cleanup_sample_vaults()

    def cancel(self) -> None:
        """Abort every in-flight and future poll started by this sample."""
        self.poller.cancel()

    async def precreate_vaults(self, count: int = 3) -> List[Any]:
        if count < 3:
            raise ValueError(f"at least 3 vaults are needed, got {count}")

        # Vault creation can take 30 seconds or more, so create them in parallel.
        created = await asyncio.gather(
            *(
                vaults.create_vault(self.mgmt_client, self.config, self.names, enable_soft_delete=True)
                for _ in range(count)
            )
        )
        self.vault_to_recover, self.vault_to_purge, self.secrets_recovery_vault = created[:3]
        return list(created)

    async def delete_vault(self, vault: Any) -> Any:
        return await vaults.delete_vault(self.mgmt_client, self.config.group_name, vault, self.poller)

    async def deleted_vault_recovery(self) -> None:
        """Soft-delete two vaults, then recover one and purge the other."""
        if self.vault_to_recover is None or self.vault_to_purge is None:
            raise SampleError("precreate_vaults() must run before deleted_vault_recovery()")

        to_recover = self.vault_to_recover
        to_purge = self.vault_to_purge
        logger.info(f"Soft deleting two vaults: {to_recover.name}, {to_purge.name}")
        await asyncio.gather(self.delete_vault(to_recover), self.delete_vault(to_purge))

        logger.info("Getting list of deleted vaults.")
        deleted_names = {vault.name for vault in await vaults.list_deleted_vaults(self.mgmt_client)}
        if to_recover.name not in deleted_names or to_purge.name not in deleted_names:
            raise SampleError("Unable to find both vaults in list of deleted vaults.")
        logger.info("Found both vaults in list of deleted vaults.")

        logger.info(f"Retrieving details of deleted vault {to_recover.name}")
        deleted_vault = await vaults.get_deleted_vault(self.mgmt_client, to_recover.name, to_recover.location)
        await vaults.recover_vault(self.mgmt_client, self.config.group_name, deleted_vault, self.config.tenant_id)

        logger.info(f"Retrieving details of deleted vault {to_purge.name}")
        purge_target = await vaults.get_deleted_vault(self.mgmt_client, to_purge.name, to_purge.location)
        await vaults.purge_vault(self.mgmt_client, purge_target)

    async def delete_secret(self, client: Any, name: str) -> Any:
        return await self.poller.run(
            lambda: client.delete_secret(name),
            lambda: client.get_deleted_secret(name),
        )

    async def recover_deleted_secret(self, client: Any, name: str) -> Any:
        return await self.poller.run(
            lambda: client.recover_deleted_secret(name),
            lambda: client.get_secret(name),
        )

    async def deleted_secret_recovery(self) -> List[str]:
        """Delete two secrets, recover one, purge the other.

        Returns the names of the secrets left in the vault.
        """
        if self.secrets_recovery_vault is None:
            raise SampleError("precreate_vaults() must run before deleted_secret_recovery()")

        secret_to_recover = self.names.name("secret")
        secret_to_purge = self.names.name("secret")
        vault_url = self.secrets_recovery_vault.properties.vault_uri

        async with self._secret_client_factory(vault_url) as client:
            secret = await client.set_secret(secret_to_recover, "secret to restore")
            logger.info(f"Created secret: {secret.name}")
            secret = await client.set_secret(secret_to_purge, "secret to purge")
            logger.info(f"Created secret: {secret.name}")

            names = [props.name async for props in client.list_properties_of_secrets()]
            logger.info(f"Secrets: {names}")

            await asyncio.gather(
                self.delete_secret(client, secret_to_recover),
                self.delete_secret(client, secret_to_purge),
            )
            logger.info(f"Deleted {secret_to_recover} and {secret_to_purge}")

            deleted = [item.name async for item in client.list_deleted_secrets()]
            logger.info(f"Deleted Secrets: {deleted}")

            await self.recover_deleted_secret(client, secret_to_recover)
            logger.info(f"Recovered {secret_to_recover}")

            await client.purge_deleted_secret(secret_to_purge)
            logger.info(f"Purged {secret_to_purge}")

            remaining = [props.name async for props in client.list_properties_of_secrets()]
            logger.info(f"Remaining secrets: {remaining}")
            return remaining

    async def _delete_sample_vaults(self) -> None:
        sample_vaults = vaults.filter_sample_vaults(await vaults.list_vaults(self.mgmt_client))
        logger.info(f"Found {len(sample_vaults)} sample vaults.")
        await asyncio.gather(*(self.delete_vault(vault) for vault in sample_vaults))

    async def _purge_sample_vaults(self) -> None:
        deleted = vaults.filter_sample_vaults(await vaults.list_deleted_vaults(self.mgmt_client))
        logger.info(f"Found {len(deleted)} deleted sample vaults.")
        await asyncio.gather(*(vaults.purge_vault(self.mgmt_client, vault) for vault in deleted))

    async def cleanup_sample_vaults(self) -> None:
        logger.info("Cleaning up remaining sample vaults.")
        await self._delete_sample_vaults()
        await self._purge_sample_vaults()
        logger.info("Purged all sample vaults.")


async def main(config: Optional[SampleConfig] = None) -> None:
    config = config or SampleConfig.from_env()

    async with create_credential(config) as credential:
        async with create_resource_management_client(config, credential) as resource_client:
            await vaults.ensure_resource_group(resource_client, config)

        async with create_keyvault_management_client(config, credential) as mgmt_client:
            sample = SoftDeleteRecoverySample(
                config,
                mgmt_client=mgmt_client,
                secret_client_factory=lambda url: create_secret_client(url, credential),
            )
            await sample.run()


if __name__ == "__main__":
    load_dotenv()
    logging.basicConfig(level=logging.INFO)
    try:
        asyncio.run(main())
    except Exception as e:
        logger.error(f"Encountered an error: {e}")
        sys.exit(1)
