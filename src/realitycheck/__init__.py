"""
Reality Check - drift and gap analysis for software projects

Reality Check runs independent analysis producers (issues, documentation,
code) concurrently, persists their results, and synthesizes them into a
prioritized remediation plan.
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
