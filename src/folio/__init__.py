"""folio: data access for portfolio projects and experiences."""

__version__ = "1.0.0"
