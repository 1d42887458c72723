"""HTTP API policy service."""
