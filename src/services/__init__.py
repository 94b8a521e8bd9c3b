"""
Utility functions for Lambda handler operations.

This package contains reusable service functions for template rendering
and credential lookup.
"""

__all__ = ['templates', 'secrets']
