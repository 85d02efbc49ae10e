"""Diagnostics package.

- plan_drift: instantaneous truncation plans across the averaging span (numpy; plot needs matplotlib)
"""

__all__ = ["plan_drift"]
