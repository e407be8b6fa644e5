"""
Tests for authentication app.

This package contains test modules for:
- test_models.py: User roles and UserManager tests
- factories.py: UserFactory and role-specific factories

Usage:
    pytest authentication/tests/
"""
