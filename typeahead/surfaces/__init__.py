from .grid import GridSurface, join_suggestion, wrap_paragraph

__all__ = ["GridSurface", "join_suggestion", "wrap_paragraph"]
