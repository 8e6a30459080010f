from __future__ import annotations

"""Azure credential and client factories.

Every factory returns an *async* Azure SDK client. The Azure packages are
imported lazily so that the poller and config can be used without them.

Clients and credentials are async context managers; close them with
``async with`` or ``await client.close()`` when done.
"""

from typing import Any

from .config import ProbeOutcome, SampleConfig
from .errors import MissingDriverError
from .polling import default_classifier


def create_credential(config: SampleConfig) -> Any:
    """Service principal credential built from the sample configuration."""
    try:
        from azure.identity.aio import ClientSecretCredential  # type: ignore
    except ImportError as exc:
        raise MissingDriverError("azure-identity is required for authentication") from exc

    return ClientSecretCredential(
        tenant_id=config.tenant_id,
        client_id=config.client_id,
        client_secret=config.client_secret,
    )


def create_default_credential(**kwargs: Any) -> Any:
    try:
        from azure.identity.aio import DefaultAzureCredential  # type: ignore
    except ImportError as exc:
        raise MissingDriverError("azure-identity is required for authentication") from exc

    return DefaultAzureCredential(**kwargs)


def create_keyvault_management_client(config: SampleConfig, credential: Any) -> Any:
    try:
        from azure.mgmt.keyvault.aio import KeyVaultManagementClient  # type: ignore
    except ImportError as exc:
        raise MissingDriverError("azure-mgmt-keyvault is required for vault management") from exc

    return KeyVaultManagementClient(credential, config.subscription_id)


def create_resource_management_client(config: SampleConfig, credential: Any) -> Any:
    try:
        from azure.mgmt.resource.resources.aio import ResourceManagementClient  # type: ignore
    except ImportError as exc:
        raise MissingDriverError("azure-mgmt-resource is required for resource groups") from exc

    return ResourceManagementClient(credential, config.subscription_id)


def create_secret_client(vault_url: str, credential: Any) -> Any:
    try:
        from azure.keyvault.secrets.aio import SecretClient  # type: ignore
    except ImportError as exc:
        raise MissingDriverError("azure-keyvault-secrets is required for secrets") from exc

    return SecretClient(vault_url=vault_url, credential=credential)


def create_key_client(vault_url: str, credential: Any) -> Any:
    try:
        from azure.keyvault.keys.aio import KeyClient  # type: ignore
    except ImportError as exc:
        raise MissingDriverError("azure-keyvault-keys is required for keys") from exc

    return KeyClient(vault_url=vault_url, credential=credential)


def create_certificate_client(vault_url: str, credential: Any) -> Any:
    try:
        from azure.keyvault.certificates.aio import CertificateClient  # type: ignore
    except ImportError as exc:
        raise MissingDriverError("azure-keyvault-certificates is required for certificates") from exc

    return CertificateClient(vault_url=vault_url, credential=credential)


def create_self_signed_policy(
    subject: str = "CN=www.contoso.com",
    *,
    key_size: int = 4096,
    reuse_key: bool = False,
    validity_in_months: int = 12,
) -> Any:
    try:
        from azure.keyvault.certificates import CertificatePolicy  # type: ignore
    except ImportError as exc:
        raise MissingDriverError("azure-keyvault-certificates is required for certificates") from exc

    return CertificatePolicy(
        issuer_name="Self",
        subject=subject,
        key_size=key_size,
        reuse_key=reuse_key,
        validity_in_months=validity_in_months,
    )


def classify_azure_error(exc: BaseException) -> ProbeOutcome:
    """Classify an Azure SDK error for the poller.

    ResourceNotFoundError and any HttpResponseError with a 404 status are
    not-found; everything else is non-retriable.
    """
    if default_classifier(exc) is ProbeOutcome.NOT_FOUND:
        return ProbeOutcome.NOT_FOUND

    # Only Azure's own exceptions need the SDK type check.
    if not type(exc).__module__.startswith("azure."):
        return ProbeOutcome.OTHER

    try:
        from azure.core.exceptions import ResourceNotFoundError  # type: ignore
    except ImportError as err:
        raise MissingDriverError("azure-core is required to classify Azure errors") from err

    if isinstance(exc, ResourceNotFoundError):
        return ProbeOutcome.NOT_FOUND
    return ProbeOutcome.OTHER

# ---------------------------------------------------------------------------
# Usage examples
#
# from kvsamples.config import SampleConfig
# from kvsamples.clients import create_credential, create_secret_client
#
# cfg = SampleConfig.from_env()
# async with create_credential(cfg) as credential:
#     async with create_secret_client("https://my-vault.vault.azure.net/", credential) as client:
#         secret = await client.set_secret("greeting", "hello")
#         print(secret.properties.version)
#
# ---------------------------------------------------------------------------
# from kvsamples.clients import classify_azure_error
# from kvsamples.polling import Poller
#
# poller = Poller(classify=classify_azure_error)
# deleted = await poller.run(
#     lambda: client.delete_secret("greeting"),
#     lambda: client.get_deleted_secret("greeting"),
# )
