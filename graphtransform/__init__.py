"""
graph-transform - Property graph transformation toolkit

Moves data out of a property graph into:
- a fresh property graph, with new identities and intact edges
- a document index, as raw per-vertex documents and rule-derived documents
"""

__version__ = "1.0.0"
