"""
ContractScope - frontend/backend API contract discovery.

Matches frontend call sites to backend routes and reports structural
mismatches between what the backend returns and what the frontend expects.
"""

__version__ = "0.1.0"
