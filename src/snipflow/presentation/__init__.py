"""Textual front end hosting the snippet commands."""
