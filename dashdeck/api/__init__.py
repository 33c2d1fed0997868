"""
dashdeck FastAPI application.

Main components:
- main: application factory, extension loading and the view selection endpoints
- schemas: Pydantic models for responses
"""
