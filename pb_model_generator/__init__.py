"""Generate typed pydantic models from a PocketBase schema."""

__version__ = "0.1.0"
