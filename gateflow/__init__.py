"""
Gated Workflow Engine

An event-driven workflow engine: a graph of nodes connected by gated edges,
advanced one external event at a time.
"""

__version__ = "0.1.0"
