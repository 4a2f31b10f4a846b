"""Terminal kanban board and relationship graph for Linear."""

__version__ = "0.1.0"
