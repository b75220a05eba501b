"""conceptour - a concept-graph explorer with guided tours."""

__version__ = "1.0.0"
__app_id__ = "io.github.conceptour"
