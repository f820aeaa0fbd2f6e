"""
iconforge: build icon fonts in an isolated worker process.

The host side (``iconforge.core``) launches ``iconforge/worker/runner.py``,
sends it one JSON request and turns its output into a structured result.
"""

__version__ = "0.1.0"
