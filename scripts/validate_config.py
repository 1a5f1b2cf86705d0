#!/usr/bin/env python3
"""Configuration validation script."""

import sys
from pathlib import Path
from typing import List, Optional

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from cart_pricing.config.loader import ConfigLoader
from cart_pricing.config.validation import ConfigValidator, ValidationError
from cart_pricing.errors import ConfigError


def validate_config_dir(config_dir: Optional[Path] = None) -> List[ValidationError]:
    """Validate the merged configuration for a config directory."""
    loader = ConfigLoader.create(config_dir)
    config = loader.merge_config()
    return ConfigValidator.validate_config(config)


def main():
    """Main validation function."""
    config_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else None
    loader = ConfigLoader.create(config_dir)
    print(f"🔍 Validating cart pricing configuration in {loader.config_dir}...")

    all_valid = True

    try:
        errors = validate_config_dir(config_dir)
        if errors:
            print(f"❌ Found {len(errors)} validation errors:")
            for error in errors:
                print(f"  • {error.field}: {error.message} (value: {error.value})")
            all_valid = False
        else:
            print("✅ pricing.yaml is valid")
    except ConfigError as e:
        print(f"❌ Could not read configuration: {e}")
        all_valid = False

    print("\n📋 Testing clamp policy override...")
    test_overrides = {
        "pricing": {
            "margin_ceiling_policy": "clamp",
            "max_margin_pct": 95.0,
        }
    }

    try:
        config = loader.merge_config(test_overrides)
        errors = ConfigValidator.validate_config(config)

        if errors:
            print("❌ Override validation failed:")
            for error in errors:
                print(f"  • {error.field}: {error.message}")
            all_valid = False
        else:
            print("✅ Override validation passed")

    except ConfigError as e:
        print(f"❌ Error testing overrides: {e}")
        all_valid = False

    if all_valid:
        print("\n🎉 All configuration validation passed!")
        sys.exit(0)
    else:
        print("\n❌ Configuration validation failed!")
        sys.exit(1)


if __name__ == "__main__":
    main()
