"""
Serving — FastAPI application for batch submission and a KServe runtime
that serves the embedding model itself.
"""
