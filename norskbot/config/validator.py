"""
YAML configuration validator for config.yaml.

Validates structure, required fields, and common misconfigurations.
"""

from __future__ import annotations

import logging
from typing import Any


logger = logging.getLogger(__name__)

KNOWN_RATE_LIMIT_TIERS = ("expensive", "cheap")


class ConfigValidationError(Exception):
    """Raised when config validation fails."""
    pass


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def validate_config(cfg: dict[str, Any], config_path: str = "config.yaml") -> None:
    """
    Comprehensive validation of config.yaml structure and content.

    Raises ConfigValidationError if validation fails.
    Logs detailed error messages before raising.

    Args:
        cfg: The loaded config dictionary
        config_path: Path to config file (for error messages)

    Raises:
        ConfigValidationError: If validation fails
    """
    errors = []
    warnings = []

    # ── Check root structure ────────────────────────────────────────────────
    if not isinstance(cfg, dict):
        errors.append(f"Config root must be a mapping, got {type(cfg).__name__}")
        cfg = {}

    # ── Check required top-level keys ───────────────────────────────────────
    if not cfg.get("bot_token"):
        errors.append("Missing required top-level key: 'bot_token' (or set DISCORD_TOKEN)")
    elif not isinstance(cfg["bot_token"], str):
        errors.append(f"'bot_token' must be a string, got {type(cfg['bot_token']).__name__}")

    # ── Validate providers ──────────────────────────────────────────────────
    if "deepl" in cfg:
        deepl = cfg["deepl"]
        if not isinstance(deepl, dict):
            errors.append(f"'deepl' must be a mapping, got {type(deepl).__name__}")
        elif "api_key" in deepl and not isinstance(deepl["api_key"], str):
            errors.append(f"'deepl.api_key' must be a string, got {type(deepl['api_key']).__name__}")
        elif not deepl.get("api_key"):
            warnings.append("'deepl.api_key' is empty, translations beyond Bokmål↔Nynorsk are disabled")
    else:
        warnings.append("No 'deepl' section, translations beyond Bokmål↔Nynorsk are disabled")

    if "apertium" in cfg:
        apertium = cfg["apertium"]
        if not isinstance(apertium, dict):
            errors.append(f"'apertium' must be a mapping, got {type(apertium).__name__}")
        elif "base_url" in apertium and not isinstance(apertium["base_url"], str):
            errors.append(
                f"'apertium.base_url' must be a string, got {type(apertium['base_url']).__name__}"
            )

    # ── Validate rate_limits section ───────────────────────────────────────
    if "rate_limits" in cfg:
        limits = cfg["rate_limits"]
        if not isinstance(limits, dict):
            errors.append(f"'rate_limits' must be a mapping, got {type(limits).__name__}")
        else:
            for tier, tier_cfg in limits.items():
                if tier not in KNOWN_RATE_LIMIT_TIERS:
                    warnings.append(
                        f"Unknown rate limit tier '{tier}'. "
                        f"Valid tiers: {', '.join(KNOWN_RATE_LIMIT_TIERS)}"
                    )
                if not isinstance(tier_cfg, dict):
                    errors.append(
                        f"Rate limit tier '{tier}' must be a mapping, got {type(tier_cfg).__name__}"
                    )
                    continue
                if "window_seconds" in tier_cfg and not (
                    _is_number(tier_cfg["window_seconds"]) and tier_cfg["window_seconds"] > 0
                ):
                    errors.append(f"'rate_limits.{tier}.window_seconds' must be a positive number")
                if "max_per_window" in tier_cfg and not _is_positive_int(tier_cfg["max_per_window"]):
                    errors.append(f"'rate_limits.{tier}.max_per_window' must be a positive integer")
                if "by_user" in tier_cfg and not isinstance(tier_cfg["by_user"], bool):
                    errors.append(
                        f"'rate_limits.{tier}.by_user' must be boolean, "
                        f"got {type(tier_cfg['by_user']).__name__}"
                    )

    if "rate_limit_store" in cfg:
        store = cfg["rate_limit_store"]
        if not isinstance(store, dict):
            errors.append(f"'rate_limit_store' must be a mapping, got {type(store).__name__}")
        else:
            if "max_entries" in store and not _is_positive_int(store["max_entries"]):
                errors.append("'rate_limit_store.max_entries' must be a positive integer")
            if "sweep_interval_seconds" in store and not (
                _is_number(store["sweep_interval_seconds"]) and store["sweep_interval_seconds"] > 0
            ):
                errors.append("'rate_limit_store.sweep_interval_seconds' must be a positive number")

    if "max_text_length" in cfg and not _is_positive_int(cfg["max_text_length"]):
        errors.append("'max_text_length' must be a positive integer")

    # ── Validate permissions section ───────────────────────────────────────
    if "permissions" in cfg:
        perms = cfg["permissions"]
        if not isinstance(perms, dict):
            errors.append(
                f"'permissions' must be a mapping, got {type(perms).__name__}"
            )
        elif "users" in perms:
            users = perms["users"]
            if not isinstance(users, dict):
                errors.append(
                    f"'permissions.users' must be a mapping, got {type(users).__name__}"
                )
            elif "admin_ids" in users and not isinstance(users["admin_ids"], list):
                errors.append(
                    f"'permissions.users.admin_ids' must be a list, "
                    f"got {type(users['admin_ids']).__name__}"
                )

    # ── Log warnings ────────────────────────────────────────────────────────
    for warning in warnings:
        logger.warning("Config warning: %s", warning)

    # ── Log errors and exit if any ──────────────────────────────────────────
    if errors:
        logger.error("=" * 70)
        logger.error("CONFIG VALIDATION FAILED (%s)", config_path)
        logger.error("=" * 70)
        for i, error in enumerate(errors, 1):
            logger.error("[%d] %s", i, error)
        logger.error("=" * 70)
        logger.error("Please fix the errors above and restart the bot.")
        logger.error("=" * 70)
        raise ConfigValidationError(f"Config validation failed with {len(errors)} error(s)")
