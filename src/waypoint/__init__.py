"""
Waypoint: redirect-following middleware for HTTP request pipelines.

Decides whether a redirect response should be followed, rebuilds the
request for the next hop, and repeats until a terminal response or the
configured hop bound is reached.
"""

__version__ = "0.1.0"
