"""Frontier scheduling, crawl orchestration and edge persistence.

Usage:
    from crawlgraph.crawling.orchestrator import CrawlOrchestrator
    from crawlgraph.crawling.fetcher import RequestsFetchEngine

    orchestrator = CrawlOrchestrator(settings, paths, RequestsFetchEngine(settings))
    result = orchestrator.crawl_seeds(seed_urls, "Google")
"""
