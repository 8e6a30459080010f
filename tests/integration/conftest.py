"""Shared helpers for integration tests.

These tests talk to a real Azure Key Vault. They need:
  KEY_VAULT_URL  - a soft-delete enabled vault the identity can manage
  and credentials DefaultAzureCredential can find (az login, env vars, ...).

Tests are skipped when KEY_VAULT_URL is not set.
"""

from __future__ import annotations

import os
import uuid

import pytest


def require_env(*names: str) -> dict[str, str]:
  """Return the requested environment variables or skip the test."""
  missing = [name for name in names if not os.environ.get(name)]
  if missing:
      pytest.skip(f"set {', '.join(missing)} to run Key Vault integration tests")
  return {name: os.environ[name] for name in names}


def unique_name(base: str) -> str:
  return f"{base}-it-{uuid.uuid4().hex[:8]}"
