"""Report pipeline: fingerprinting, caching, generation and retrieval."""
