"""Report layer: the immutable report model and its table, chart and PDF renderers."""
