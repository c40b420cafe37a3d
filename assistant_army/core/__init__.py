"""Shared infrastructure: logging, monitoring and the database layer."""
