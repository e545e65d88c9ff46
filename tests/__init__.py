"""
Adaptive Router Test Suite
==========================

Run all tests:
    pytest tests/ -v

Run with coverage:
    pytest tests/ --cov=adaptive_router --cov-report=html

These tests use fake providers and never touch the network.
"""
