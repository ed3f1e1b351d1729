"""Documentation resolution, caching and search engine."""
