"""Drill-down from stakeholders to workflow steps to pain points.

This package contains:
- cache: Session-scoped pain-point analysis cache with request de-duplication
- sources: Collaborator protocols and boundary fetch functions
- selection: Navigation state machine for the drill-down explorer
"""
