"""Upload CI run artifacts to a published GitHub release."""

__version__ = "0.1.0"
