"""Low-level helpers: git invocation, date windows, logging setup."""
