"""Goose Chase: Chicago venue directory server."""
