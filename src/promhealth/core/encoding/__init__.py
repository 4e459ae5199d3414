"""Wire formats: exposition text and alerts JSON in, NDJSON out."""
