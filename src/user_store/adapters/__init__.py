"""Adapters layer - concrete implementations of ports.

Outbound adapters talk to the relational store through SQLAlchemy and
provide the random identity source used by the demonstration.
"""
