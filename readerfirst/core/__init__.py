"""Core models, errors and the chunk translation pipeline."""
