"""pagekit: page builder controllers for a tenant pages API."""

__version__ = "0.1.0"
