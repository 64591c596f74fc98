"""Integration tests for components working together.

Coverage:
    - API endpoints with real HTTP requests against the FastAPI app
    - ApiClient error mapping over HTTP
    - Full question cycle from the session flow down to the upstreams
"""
