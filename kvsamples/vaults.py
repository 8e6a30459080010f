from __future__ import annotations

"""Key Vault management-plane helpers.

These functions take an async ``KeyVaultManagementClient`` (see
``kvsamples.clients``) and return the SDK's own model objects. Request
bodies are plain dicts in the REST shape, which the SDK accepts in place of
its model classes.
"""

import logging
from typing import Any, Dict, Iterable, List

from .config import (
    CERTIFICATE_PERMISSIONS,
    KEY_PERMISSIONS,
    SECRET_PERMISSIONS,
    STORAGE_PERMISSIONS,
    CreateMode,
    SampleConfig,
    SkuName,
)
from .naming import NameGenerator, is_sample_vault_name
from .polling import Poller

logger = logging.getLogger(__name__)


def vault_parameters(config: SampleConfig, *, enable_soft_delete: bool = False) -> Dict[str, Any]:
    """Create-or-update body granting the sample principal full access."""
    properties: Dict[str, Any] = {
        "tenantId": config.tenant_id,
        "sku": {"family": "A", "name": SkuName.STANDARD.value},
        "accessPolicies": [
            {
                "tenantId": config.tenant_id,
                "objectId": config.client_object_id,
                "permissions": {
                    "keys": list(KEY_PERMISSIONS),
                    "secrets": list(SECRET_PERMISSIONS),
                    "certificates": list(CERTIFICATE_PERMISSIONS),
                    "storage": list(STORAGE_PERMISSIONS),
                },
            }
        ],
    }
    # The service rejects enableSoftDelete=false, and once enabled it cannot
    # be turned off, so the property is either True or absent.
    if enable_soft_delete:
        properties["enableSoftDelete"] = True

    return {"location": config.location, "properties": properties, "tags": {}}


async def ensure_resource_group(resource_client: Any, config: SampleConfig) -> Any:
    logger.info(f"Ensuring resource group {config.group_name} in {config.location}")
    return await resource_client.resource_groups.create_or_update(
        config.group_name, {"location": config.location}
    )


async def create_vault(
    client: Any,
    config: SampleConfig,
    names: NameGenerator,
    *,
    enable_soft_delete: bool = False,
) -> Any:
    vault_name = names.name("vault")
    if enable_soft_delete:
        logger.info(f"Creating soft delete enabled vault: {vault_name}")
    else:
        logger.info(f"Creating key vault: {vault_name}")

    poller = await client.vaults.begin_create_or_update(
        config.group_name,
        vault_name,
        vault_parameters(config, enable_soft_delete=enable_soft_delete),
    )
    vault = await poller.result()
    logger.info(f"Vault {vault.name} created enableSoftDelete={vault.properties.enable_soft_delete}")
    return vault


async def enable_soft_delete_on_existing_vault(client: Any, config: SampleConfig, vault: Any) -> Any:
    updated = await client.vaults.update(
        config.group_name,
        vault.name,
        {"properties": {"enableSoftDelete": True}},
    )
    logger.info(f"Updated vault {updated.name} enableSoftDelete={updated.properties.enable_soft_delete}")
    return updated


async def list_vaults(client: Any) -> List[Any]:
    return [vault async for vault in client.vaults.list()]


async def list_deleted_vaults(client: Any) -> List[Any]:
    return [vault async for vault in client.vaults.list_deleted()]


async def get_deleted_vault(client: Any, name: str, location: str) -> Any:
    return await client.vaults.get_deleted(name, location)


async def delete_vault(client: Any, group_name: str, vault: Any, poller: Poller) -> Any:
    """Soft-delete ``vault`` and wait until it shows up as deleted."""
    name = vault.name
    location = vault.location
    logger.info(f"Deleting vault {name}")
    return await poller.run(
        lambda: client.vaults.delete(group_name, name),
        lambda: client.vaults.get_deleted(name, location),
    )


async def recover_vault(client: Any, group_name: str, deleted_vault: Any, tenant_id: str) -> Any:
    # Minimum set of parameters needed to recover a deleted vault.
    recovery_parameters = {
        "location": deleted_vault.properties.location,
        "properties": {
            "createMode": CreateMode.RECOVER.value,
            "tenantId": tenant_id,
            "sku": {"family": "A", "name": SkuName.STANDARD.value},
            "accessPolicies": [],
        },
    }

    logger.info(f"Recovering vault {deleted_vault.name}")
    poller = await client.vaults.begin_create_or_update(group_name, deleted_vault.name, recovery_parameters)
    recovered = await poller.result()
    logger.info(f"Recovered vault {recovered.name}")
    return recovered


async def purge_vault(client: Any, deleted_vault: Any) -> None:
    logger.info(f"Purging vault {deleted_vault.name}")
    poller = await client.vaults.begin_purge_deleted(deleted_vault.name, deleted_vault.properties.location)
    await poller.result()
    logger.info(f"Purged vault {deleted_vault.name}")


def filter_sample_vaults(vaults: Iterable[Any]) -> List[Any]:
    return [vault for vault in vaults if is_sample_vault_name(vault.name)]
