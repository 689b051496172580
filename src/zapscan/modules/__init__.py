"""Feature modules for zapscan."""
