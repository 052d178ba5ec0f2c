"""Stakeholder Explorer.

Headless core of an exploratory-analysis tool: turns an industry query into
a stakeholder relationship graph with a live force-directed layout, and a
cache-backed drill-down from stakeholders to workflow steps to evidenced
pain points.
"""

__version__ = "1.0.0"
