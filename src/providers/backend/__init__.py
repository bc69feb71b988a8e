"""Content Processing Backend adapters."""
