"""
Tabular Insights API package.

The FastAPI application lives in tabular_insights.api.app.
"""
