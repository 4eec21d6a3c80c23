"""Lead intake back end for the agency site."""

__version__ = "0.1.0"
