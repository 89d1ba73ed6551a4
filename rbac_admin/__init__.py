"""Role-based access control administration backend."""

__version__ = "0.1.0"
