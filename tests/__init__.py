# tests\__init__.py
"""
Test Suite for the Product Catalog API.

Organization:
- `core`: Token codec, password hashing, route policy, query engine and services, against an in-memory database.
- `http_api`: End-to-end API tests through FastAPI's TestClient.
"""
