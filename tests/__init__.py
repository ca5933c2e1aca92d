"""
VirtualTV Test Suite

Test Categories:
- unit/: Fast, isolated unit tests
- integration/: HTTP API tests against an in-memory catalog
- fixtures/: Shared test data and mocks
"""
