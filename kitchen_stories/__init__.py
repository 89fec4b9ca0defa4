"""Kitchen Stories: a single-tenant recipe catalog API."""

__version__ = "0.1.0"
