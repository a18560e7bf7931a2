"""Raising Sim — a turn-based character raising simulation engine."""
