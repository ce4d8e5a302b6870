"""API key authentication service."""
