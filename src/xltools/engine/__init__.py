"""Workbook model, tabular projection and the public operations."""
