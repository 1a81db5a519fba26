"""Evaluators: pure reductions from findings to one bounded check result."""
