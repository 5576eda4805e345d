"""
phonecheck
Multi-source risk verdicts for French phone numbers.
"""

__version__ = '1.0.0'
