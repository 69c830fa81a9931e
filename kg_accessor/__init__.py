"""Typed accessor layer over a property graph.

Entity kinds and their relationships are declared once in a schema
registry; entities fetched from the graph expose their relationships as
zero-argument accessors that each run a single one-hop query.
"""

__version__ = "0.1.0"
__author__ = "kg-accessor contributors"
__description__ = "Schema-driven typed relationship accessors for property graphs"
