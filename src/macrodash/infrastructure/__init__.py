"""Infrastructure layer: HTTP, providers, analysis, cache and wiring."""
