"""Configuration validation utilities."""

from dataclasses import dataclass, fields
from typing import Any

from .defaults import DebounceParams, NotificationParams, PricingParams, SessionParams

SECTIONS = {
    "debounce": DebounceParams,
    "pricing": PricingParams,
    "session": SessionParams,
    "notifications": NotificationParams,
}

CEILING_POLICIES = ("reject", "clamp")
NOTIFICATION_METHODS = ("log", "stdout")
NOTIFICATION_FORMATS = ("pretty", "json")


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_debounce_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate debounce parameters."""
        errors = []

        if "quiet_period_ms" in params:
            value = params["quiet_period_ms"]
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                errors.append(ValidationError(
                    field="debounce.quiet_period_ms",
                    message="Must be a non-negative integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_pricing_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate price/margin arithmetic parameters."""
        errors = []

        if "decimals" in params:
            value = params["decimals"]
            if not isinstance(value, int) or isinstance(value, bool) or value < 0 or value > 10:
                errors.append(ValidationError(
                    field="pricing.decimals",
                    message="Must be an integer between 0 and 10",
                    value=value
                ))

        if "margin_ceiling_policy" in params:
            value = params["margin_ceiling_policy"]
            if value not in CEILING_POLICIES:
                errors.append(ValidationError(
                    field="pricing.margin_ceiling_policy",
                    message=f"Must be one of {', '.join(CEILING_POLICIES)}",
                    value=value
                ))

        # Must stay strictly below 100 or the clamped price is non-finite
        if "max_margin_pct" in params:
            value = params["max_margin_pct"]
            if not _is_number(value) or value >= 100:
                errors.append(ValidationError(
                    field="pricing.max_margin_pct",
                    message="Must be a number below 100",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_session_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate session parameters."""
        errors = []

        for name in ("flush_pending_on_save", "refresh_after_save"):
            if name in params and not isinstance(params[name], bool):
                errors.append(ValidationError(
                    field=f"session.{name}",
                    message="Must be a boolean",
                    value=params[name]
                ))

        return errors

    @staticmethod
    def validate_notification_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate notification parameters."""
        errors = []

        if "method" in params and params["method"] not in NOTIFICATION_METHODS:
            errors.append(ValidationError(
                field="notifications.method",
                message=f"Must be one of {', '.join(NOTIFICATION_METHODS)}",
                value=params["method"]
            ))

        if "format" in params and params["format"] not in NOTIFICATION_FORMATS:
            errors.append(ValidationError(
                field="notifications.format",
                message=f"Must be one of {', '.join(NOTIFICATION_FORMATS)}",
                value=params["format"]
            ))

        return errors

    @staticmethod
    def validate_unknown_keys(config: dict[str, Any]) -> list[ValidationError]:
        """Report sections and keys the typed configuration does not define."""
        errors = []

        for section, params in config.items():
            if section not in SECTIONS:
                errors.append(ValidationError(
                    field=section,
                    message="Unknown configuration section",
                    value=params
                ))
                continue

            if not isinstance(params, dict):
                errors.append(ValidationError(
                    field=section,
                    message="Must be a mapping",
                    value=params
                ))
                continue

            known = {f.name for f in fields(SECTIONS[section])}
            for key in params:
                if key not in known:
                    errors.append(ValidationError(
                        field=f"{section}.{key}",
                        message="Unknown configuration key",
                        value=params[key]
                    ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = ConfigValidator.validate_unknown_keys(config)
        if errors:
            return errors

        if "debounce" in config:
            errors.extend(ConfigValidator.validate_debounce_params(config["debounce"]))

        if "pricing" in config:
            errors.extend(ConfigValidator.validate_pricing_params(config["pricing"]))

        if "session" in config:
            errors.extend(ConfigValidator.validate_session_params(config["session"]))

        if "notifications" in config:
            errors.extend(ConfigValidator.validate_notification_params(config["notifications"]))

        return errors
