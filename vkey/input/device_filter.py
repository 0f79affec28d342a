"""Device filtering: keep physical keyboards, skip synthetic devices."""

from __future__ import annotations

# Name fragments of devices whose events must never be composed: our own
# virtual keyboard would otherwise feed its backspaces back into the engine
EXCLUDE_NAME_FRAGMENTS = [
    "virtual",
    "vkey",
    "uinput",
    "xtest",
]


def should_include_device(device_name: str) -> bool:
    """Return True if the device should be monitored."""
    lower = device_name.lower()
    return not any(fragment in lower for fragment in EXCLUDE_NAME_FRAGMENTS)
