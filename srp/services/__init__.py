"""Pruning services: selection predicates, listing traversal, deletion."""
