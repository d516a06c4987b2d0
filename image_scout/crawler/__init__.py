"""Crawl engine: page models, transport, fetcher and the three scheduling strategies."""
