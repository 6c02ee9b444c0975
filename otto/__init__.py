"""
OTTO Agentic Commerce package

This package contains the backend for the OTTO chat demo:
- services: classification, solution building, reasoning steps and run orchestration
- routers: chat sessions, catalog browsing and the image analysis/generation endpoints
- data: the static mock catalog and solution templates
"""

__version__ = "1.0.0"
