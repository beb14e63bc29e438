# bucketlist_advisor/__init__.py
"""Client-side session protocol for reviewing bucket list suggestions against a budget."""

__version__ = "0.1.0"
