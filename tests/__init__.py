"""
Test suite for the sales analytics API.

Run all tests: pytest
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_cover_service.py -v
"""
