"""
Operator layer for pathkit.

Provides policy-checked, audited file-system operations.
"""

from .path_ops import PathOperator

__all__ = ['PathOperator']
