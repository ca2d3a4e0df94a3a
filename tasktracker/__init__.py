"""Multi-user task tracker API with token authentication and owner-scoped tasks."""

__version__ = "0.1.0"
