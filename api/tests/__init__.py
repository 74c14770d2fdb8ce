"""
Test suite for the menu store.

Provides:
- Index manager tests
- Repository save/lookup/history tests
- Similarity search tests
- Store backend and observability tests
"""
