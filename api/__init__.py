"""API package - HTTP surface over the storage layer."""
