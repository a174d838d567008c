"""Code Tutor - safety and formatting pipeline for an educational coding assistant."""

__version__ = "0.1.0"
