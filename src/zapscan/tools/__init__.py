"""Low-level tooling used by the scan modules."""
