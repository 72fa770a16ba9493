"""Shared helpers: error handling, validation and rendering."""
