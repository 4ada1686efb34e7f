"""
Tabular Insights: upload spreadsheets, summarize them and ask an AI about them.
"""

__version__ = "1.0.0"
