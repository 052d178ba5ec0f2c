"""Stakeholder graph components.

This package contains:
- builder.py: Graph construction and validation from raw source data
- reducer.py: Bounding oversized graphs to the most connected nodes
- layout.py: Force-directed layout engine
- edge_labels.py: Curved edge paths and label placement
- validators/: Graph invariant checks
"""
