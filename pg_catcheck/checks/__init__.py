"""Column validators, auto-discovered by :mod:`pg_catcheck.registry`."""
