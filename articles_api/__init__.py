"""Articles API: user accounts and owner-scoped short text articles."""

__version__ = "1.0.0"
