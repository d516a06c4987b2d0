"""HTML parsing for link and image extraction."""
