"""
FastAPI RESTful API for the Books service.

This package provides:
- An in-memory book registry with create/read/update/delete
- Author filtering and page/size pagination for listings
- OpenAPI documentation served under /api-docs
"""
