"""Probes: pure functions that classify a raw evidence record into findings.

Probes know nothing about points. Each module exposes a ``PROBES`` tuple in
the order its findings should be emitted.
"""
