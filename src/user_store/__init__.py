"""
User Store - transactional user/profile CRUD over a pooled relational store

Demonstrates parameterized CRUD, all-or-nothing multi-table writes and
deterministic rollback proofs driven by uniqueness-constraint violations.
"""

__version__ = "0.1.0"
__author__ = "Systems Engineering Portfolio"
