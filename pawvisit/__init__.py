"""Visit booking and scheduling engine for animal shelters."""

__version__ = "0.1.0"
