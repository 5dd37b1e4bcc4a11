"""
Command-line interface for the datetime check.
"""
