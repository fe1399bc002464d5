"""
Compliance Kernel

A regulatory gate for cross-jurisdiction asset transfers with:
- Ordered jurisdiction rules with wildcard matching
- Default-deny validation verdicts
- Per-account jurisdiction directory
- Time-bounded authority approvals
"""

__version__ = "0.1.0"
