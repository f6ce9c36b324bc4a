"""Pydantic schemas: detached values handed out by the repository and API contracts."""
