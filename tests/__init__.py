# SealFile Test Suite
"""
Test suite including:
- Unit tests per module
- Orchestrator and batch tests against a temporary directory
- Security tests (tampering, wrong secrets, concurrency)

Run with: pytest
Coverage: coverage run -m pytest && coverage report
"""
