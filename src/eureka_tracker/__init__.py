"""Track work sessions on tasks against git and aggregate them per branch."""

__version__ = "0.1.0"
