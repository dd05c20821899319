from __future__ import annotations

from typing import Any, Dict

from norskbot.ratelimit import RateLimitPolicy
from norskbot.translation.router import DEFAULT_POLICIES


DEFAULT_MAX_ENTRIES = 10000
DEFAULT_SWEEP_INTERVAL_SECONDS = 300


def load_rate_limit_policies(config: dict[str, Any]) -> Dict[str, RateLimitPolicy]:
    """
    Build per-tier policies from config['rate_limits'], falling back to the
    built-in defaults field by field.
    """
    policies = dict(DEFAULT_POLICIES)
    for tier, tier_cfg in (config.get("rate_limits") or {}).items():
        if not isinstance(tier_cfg, dict):
            continue
        base = policies.get(tier, RateLimitPolicy())
        policies[tier] = RateLimitPolicy(
            window=float(tier_cfg.get("window_seconds", base.window)),
            max_per_window=int(tier_cfg.get("max_per_window", base.max_per_window)),
            by_user=bool(tier_cfg.get("by_user", base.by_user)),
        )
    return policies


def store_settings(config: dict[str, Any]) -> tuple[int, float]:
    """Return (max_entries, sweep_interval_seconds) for the rate limit store."""
    store = config.get("rate_limit_store") or {}
    return (
        int(store.get("max_entries", DEFAULT_MAX_ENTRIES)),
        float(store.get("sweep_interval_seconds", DEFAULT_SWEEP_INTERVAL_SECONDS)),
    )
