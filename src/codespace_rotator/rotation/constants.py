"""Constants for the rotation module.

This module centralizes policy values used across the rotation package.
Runtime overrides live in ``codespace_rotator.config``.
"""

# Quota oracle fallback policy: whether an account whose usage cannot be
# fetched is admitted. Fail-closed: an unverifiable account is treated as
# exhausted and skipped.
QUOTA_FALLBACK_ADMITS = False

# Product name of Codespaces items in the billing usage report
CODESPACES_PRODUCT = "codespaces"

# Usage is normalized to minutes of this machine size
BASE_MACHINE_CORES = 2

MINUTES_PER_HOUR = 60
SECONDS_PER_HOUR = 3600
