from __future__ import annotations

"""Backup and restore sample for keys, secrets and certificates.

Each flow creates an item in one vault, backs it up, and restores the
backup into a second, freshly created vault.
"""

import asyncio
import logging
import sys
from typing import Any, Callable, List, Optional

from dotenv import load_dotenv

from . import vaults
from .clients import (
    create_certificate_client,
    create_credential,
    create_key_client,
    create_keyvault_management_client,
    create_resource_management_client,
    create_secret_client,
    create_self_signed_policy,
)
from .config import SampleConfig
from .naming import NameGenerator

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str], Any]


class BackupRestoreSample:
    def __init__(
        self,
        config: SampleConfig,
        *,
        mgmt_client: Any,
        key_client_factory: ClientFactory,
        secret_client_factory: ClientFactory,
        certificate_client_factory: ClientFactory,
        names: Optional[NameGenerator] = None,
        certificate_policy_factory: Callable[[], Any] = create_self_signed_policy,
    ):
        self.config = config
        self.mgmt_client = mgmt_client
        self._key_client_factory = key_client_factory
        self._secret_client_factory = secret_client_factory
        self._certificate_client_factory = certificate_client_factory
        self._certificate_policy_factory = certificate_policy_factory
        self.names = names or NameGenerator()

    async def run(self) -> None:
        await self.backup_restore_key()
        await self.backup_restore_certificate()

    async def _create_vault(self) -> Any:
        return await vaults.create_vault(self.mgmt_client, self.config, self.names)

    async def backup_restore_key(self) -> List[str]:
        logger.info("Key backup and restore sample.")

        first_vault = await self._create_vault()
        key_name = self.names.name("key")
        async with self._key_client_factory(first_vault.properties.vault_uri) as client:
            await client.create_rsa_key(key_name)
            logger.info(f"created key {key_name}")
            logger.info("Backing up key.")
            backup = await client.backup_key(key_name)
            logger.info(f"backed up key {key_name}")

        second_vault = await self._create_vault()
        async with self._key_client_factory(second_vault.properties.vault_uri) as client:
            logger.info("Restoring")
            await client.restore_key_backup(backup)
            logger.info(f"restored key {key_name}")
            key_ids = [props.id async for props in client.list_properties_of_keys()]

        logger.info(f"vault {second_vault.name} keys:")
        for key_id in key_ids:
            logger.info(f"  kid: {key_id}")
        return key_ids

    async def backup_restore_secret(self) -> List[str]:
        logger.info("Secret backup and restore sample.")

        first_vault = await self._create_vault()
        secret_name = self.names.name("secret")
        async with self._secret_client_factory(first_vault.properties.vault_uri) as client:
            logger.info(f"Creating secret: {secret_name}")
            await client.set_secret(secret_name, "AValue")
            logger.info(f"created secret {secret_name}")
            logger.info("Backing up secret")
            backup = await client.backup_secret(secret_name)
            logger.info(f"backed up secret {secret_name}")

        second_vault = await self._create_vault()
        async with self._secret_client_factory(second_vault.properties.vault_uri) as client:
            logger.info("Restoring.")
            await client.restore_secret_backup(backup)
            logger.info(f"restored secret {secret_name}")
            secret_ids = [props.id async for props in client.list_properties_of_secrets()]

        logger.info(f"vault {second_vault.name} secrets:")
        for secret_id in secret_ids:
            logger.info(f"  id: {secret_id}")
        return secret_ids

    async def backup_restore_certificate(self) -> List[str]:
        logger.info("Certificate backup and restore sample.")

        first_vault = await self._create_vault()
        certificate_name = self.names.name("certificate")
        async with self._certificate_client_factory(first_vault.properties.vault_uri) as client:
            logger.info(f"Creating certificate: {certificate_name}")
            await client.create_certificate(
                certificate_name=certificate_name,
                policy=self._certificate_policy_factory(),
            )
            logger.info(f"created certificate {certificate_name}")
            logger.info("Backing up certificate.")
            backup = await client.backup_certificate(certificate_name)
            logger.info(f"backed up certificate {certificate_name}")

        second_vault = await self._create_vault()
        async with self._certificate_client_factory(second_vault.properties.vault_uri) as client:
            logger.info("Restoring.")
            await client.restore_certificate_backup(backup)
            logger.info(f"restored certificate {certificate_name}")
            certificate_ids = [props.id async for props in client.list_properties_of_certificates()]

        logger.info(f"vault {second_vault.name} certificates:")
        for certificate_id in certificate_ids:
            logger.info(f"  id: {certificate_id}")
        return certificate_ids


async def main(config: Optional[SampleConfig] = None) -> None:
    config = config or SampleConfig.from_env()

    async with create_credential(config) as credential:
        async with create_resource_management_client(config, credential) as resource_client:
            await vaults.ensure_resource_group(resource_client, config)

        async with create_keyvault_management_client(config, credential) as mgmt_client:
            sample = BackupRestoreSample(
                config,
                mgmt_client=mgmt_client,
                key_client_factory=lambda url: create_key_client(url, credential),
                secret_client_factory=lambda url: create_secret_client(url, credential),
                certificate_client_factory=lambda url: create_certificate_client(url, credential),
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
