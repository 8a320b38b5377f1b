"""
Tenant resolution and per-provider configuration lookups.

A tenant names one credential profile per provider. Requests select it with
the reserved ``_config`` parameter; without it the ``default`` profile is used.
"""

from typing import Any, Dict, Mapping, Optional

from .common.exceptions import WECHAT_CONFIG_ERROR, InvalidConfigError
from .config import ConfigStore, MODE_NORMAL, MODE_SANDBOX, MODE_SERVICE


TENANT_PARAM = "_config"
DEFAULT_TENANT = "default"

ALIPAY = "alipay"
WECHAT = "wechat"
UNIPAY = "unipay"

WECHAT_URL = {
    MODE_NORMAL: "https://api.mch.weixin.qq.com/",
    MODE_SANDBOX: "https://api.mch.weixin.qq.com/sandboxnew/",
    MODE_SERVICE: "https://api.mch.weixin.qq.com/",
}


def get_tenant(params: Optional[Mapping[str, Any]] = None) -> str:
    value = (params or {}).get(TENANT_PARAM)
    return DEFAULT_TENANT if value is None else str(value)


def get_provider_config(store: ConfigStore, provider: str, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Return the tenant's config for ``provider``, or ``{}`` when absent."""
    tenants = store.get(provider) or {}
    return tenants.get(get_tenant(params)) or {}


def get_alipay_config(store: ConfigStore, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    return get_provider_config(store, ALIPAY, params)


def get_wechat_config(store: ConfigStore, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    return get_provider_config(store, WECHAT, params)


def get_unipay_config(store: ConfigStore, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    return get_provider_config(store, UNIPAY, params)


def get_wechat_base_uri(store: ConfigStore, params: Optional[Mapping[str, Any]] = None) -> str:
    """Map the tenant's ``mode`` to the Wechat API base URL."""
    mode = get_wechat_config(store, params).get("mode", MODE_NORMAL)

    try:
        return WECHAT_URL[int(mode)]
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidConfigError(f"Invalid Wechat Config -- [mode={mode}]", WECHAT_CONFIG_ERROR) from e
