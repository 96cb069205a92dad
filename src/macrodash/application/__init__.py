"""Application layer: services that orchestrate providers and analysis."""
