"""
imgcrawler

Distributed same-domain crawler that collects image references, coordinating
a pool of workers through shared Redis state.
"""

__version__ = "0.1.0"
