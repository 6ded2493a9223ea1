"""Core policy logic for hospital asset and request tracking.

This package contains the business rules and domain models,
isolated from any backend client for easy testing and reasoning.
"""
