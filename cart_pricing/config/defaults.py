"""Default configuration parameters for the cart pricing engine."""

from dataclasses import dataclass


@dataclass(frozen=True)
class DebounceParams:
    """Edit debounce parameters."""
    quiet_period_ms: int = 500                       # Quiet time before an edit commits


@dataclass(frozen=True)
class PricingParams:
    """Price/margin arithmetic parameters."""
    decimals: int = 2                                # Rounding precision for price and margin
    margin_ceiling_policy: str = "reject"            # "reject" or "clamp" at margin >= 100%
    max_margin_pct: float = 99.99                    # Clamp target when policy is "clamp"


@dataclass(frozen=True)
class SessionParams:
    """Save/refresh behaviour of the UI-facing session."""
    flush_pending_on_save: bool = True               # Commit debounced edits before saving
    refresh_after_save: bool = True                  # Re-seed from the source after a clean save


@dataclass(frozen=True)
class NotificationParams:
    """Notification output parameters."""
    method: str = "log"                              # "log" or "stdout"
    format: str = "pretty"                           # "pretty" or "json" (stdout only)


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    debounce: DebounceParams
    pricing: PricingParams
    session: SessionParams
    notifications: NotificationParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        debounce=DebounceParams(),
        pricing=PricingParams(),
        session=SessionParams(),
        notifications=NotificationParams(),
    )
