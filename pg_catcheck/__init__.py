"""pg-catcheck: system catalog integrity checker for PostgreSQL."""

__version__ = "0.1.0"
