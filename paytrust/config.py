"""
Configuration for PayTrust.

Provider credentials live in a key/value ``ConfigStore`` addressed with
dotted keys (``wechat.default.mch_secret_key``). Process-level switches are
read from the environment (optionally a ``.env`` file) into ``TrustSettings``.
"""

import json
import os
from typing import Any, Dict, List, Optional, Protocol

from dotenv import load_dotenv
from pydantic import BaseModel, Field


MODE_NORMAL = 0
MODE_SANDBOX = 1
MODE_SERVICE = 2

DEFAULT_CERTIFICATES_METHOD = "v3/certificates"


class ConfigStore(Protocol):
    """Key/value store the host application owns."""

    def get(self, key: str, default: Any = None) -> Any:
        ...

    def set(self, key: str, value: Any) -> None:
        ...


class InMemoryConfigStore:
    """Nested-dict ``ConfigStore`` addressed with dotted keys."""

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = data if data is not None else {}

    def get(self, key: str, default: Any = None) -> Any:
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def set(self, key: str, value: Any) -> None:
        parts = key.split(".")
        node = self._data
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[parts[-1]] = value

    def all(self) -> Dict[str, Any]:
        return self._data


class TrustSettings(BaseModel):
    """Process-level switches that are not per-tenant credentials."""

    trusted_webhook_hosts: List[str] = Field(
        default_factory=list,
        description="Hosts whose inbound webhooks skip signature verification",
    )
    certificates_method: str = DEFAULT_CERTIFICATES_METHOD


def load_settings() -> TrustSettings:
    """
    Build settings from the environment.

    Reads ``.env`` first, then:
        PAYTRUST_TRUSTED_WEBHOOK_HOSTS: comma-separated host names
        PAYTRUST_CERTIFICATES_METHOD: certificate-listing method name
    """
    load_dotenv()

    hosts = os.getenv("PAYTRUST_TRUSTED_WEBHOOK_HOSTS", "")
    return TrustSettings(
        trusted_webhook_hosts=[h.strip() for h in hosts.split(",") if h.strip()],
        certificates_method=os.getenv("PAYTRUST_CERTIFICATES_METHOD", DEFAULT_CERTIFICATES_METHOD),
    )


def load_config_store(path: Optional[str] = None) -> InMemoryConfigStore:
    """
    Load provider configuration from a JSON file.

    Args:
        path: File to read. Falls back to PAYTRUST_CONFIG_PATH, then to an
            empty store when neither points at an existing file.
    """
    load_dotenv()

    config_path = path or os.getenv("PAYTRUST_CONFIG_PATH", "paytrust.json")
    if os.path.exists(config_path):
        with open(config_path) as f:
            return InMemoryConfigStore(json.load(f) or {})
    return InMemoryConfigStore()
