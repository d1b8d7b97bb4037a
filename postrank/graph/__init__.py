"""Recommendation graph building and visualization."""
