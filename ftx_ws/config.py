"""API credential loading.

Credentials come either from the environment or from a small YAML file::

    key: "..."
    secret: "..."
    subaccount: "trading"   # optional
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml


@dataclass(frozen=True)
class FtxCredentials:
    """API key pair and optional subaccount.

    Attributes:
        key: API key.
        secret: API secret; only used to sign the login command.
        subaccount: Subaccount name, None for the main account.
    """

    key: str
    secret: str
    subaccount: str | None = None

    def __repr__(self) -> str:
        return f"FtxCredentials(key={self.key!r}, secret='***', subaccount={self.subaccount!r})"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> FtxCredentials:
        """Build credentials from a parsed mapping.

        Raises:
            ValueError: If key or secret is missing or not a string
        """
        key = data.get("key")
        secret = data.get("secret")
        subaccount = data.get("subaccount")
        if not isinstance(key, str) or not key:
            raise ValueError("Credentials require a non-empty 'key'")
        if not isinstance(secret, str) or not secret:
            raise ValueError("Credentials require a non-empty 'secret'")
        if subaccount is not None and not isinstance(subaccount, str):
            raise ValueError("'subaccount' must be a string")
        return cls(key=key, secret=secret, subaccount=subaccount or None)

    @classmethod
    def from_env(
        cls, prefix: str = "FTX_", environ: Mapping[str, str] | None = None
    ) -> FtxCredentials:
        """Read ``{prefix}API_KEY``, ``{prefix}API_SECRET`` and ``{prefix}SUBACCOUNT``."""
        env = os.environ if environ is None else environ
        return cls.from_mapping(
            {
                "key": env.get(f"{prefix}API_KEY"),
                "secret": env.get(f"{prefix}API_SECRET"),
                "subaccount": env.get(f"{prefix}SUBACCOUNT"),
            }
        )


def load_credentials(path: str | Path) -> FtxCredentials:
    """Load credentials from a YAML file.

    Raises:
        ValueError: If the file is not a YAML mapping with key and secret
    """
    with Path(path).open(encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Credentials file {path} must contain a mapping")
    return FtxCredentials.from_mapping(data)
