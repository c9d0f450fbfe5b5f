"""Query-resolution core of the nlauncher desktop command launcher."""

__version__ = "0.3.0"
