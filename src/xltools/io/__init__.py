"""Workbook codecs and file-system helpers."""
