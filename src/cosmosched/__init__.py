"""Task scheduling and timeline engine for cosmetics production orders."""

__version__ = "0.1.0"
