"""Application layer: use cases over domain entities and infrastructure ports."""
