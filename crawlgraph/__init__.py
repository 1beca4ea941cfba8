"""crawlgraph: search-seeded web crawls exported as comparable link graphs."""

__version__ = "0.1.0"
