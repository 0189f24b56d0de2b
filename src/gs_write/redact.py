"""Mask sensitive values in nested configuration data."""

from __future__ import annotations

from typing import Any, Union

# Values in a configuration tree: scalars, nested mappings or lists
ConfigValue = Union[str, int, float, bool, None, "ConfigTree", list["ConfigValue"]]
ConfigTree = dict[str, ConfigValue]

# A key containing any of these (case-insensitive) has its value masked
SENSITIVE_KEYWORDS = (
    "password",
    "passphrase",
    "secret",
    "token",
    "apikey",
    "access_key",
    "secret_key",
    "private_key",
    "credential",
)

MASK_TEXT = "****"


def is_sensitive_key(key: str) -> bool:
    lower_key = key.lower()
    return any(keyword in lower_key for keyword in SENSITIVE_KEYWORDS)


def redact(tree: ConfigTree) -> ConfigTree:
    """Return a copy of tree with sensitive values replaced by MASK_TEXT.

    A sensitive key masks its whole value, even when that value is a
    nested mapping. Other mappings and lists are processed recursively.
    """
    return {
        key: MASK_TEXT if is_sensitive_key(key) else _redact_value(value)
        for key, value in tree.items()
    }


def _redact_value(value: ConfigValue) -> ConfigValue:
    if isinstance(value, dict):
        return redact(value)
    if isinstance(value, list):
        return [_redact_value(item) for item in value]
    return value
