"""niftyscan core: models, indicators, providers and services."""
