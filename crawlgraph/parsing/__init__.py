"""URL, HTML and robots.txt parsing helpers used by the fetch engine."""
