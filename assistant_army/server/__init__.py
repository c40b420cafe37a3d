"""
Assistant Army Server Package.

This package contains the web server implementation for Assistant Army.

Subpackages:
    api: FastAPI route definitions and endpoint logic.
    core: Configuration, constants and database session wiring.
    services: Chat turn orchestration and dependency providers.
    exception_handlers: Mapping of domain errors to HTTP responses.
"""
