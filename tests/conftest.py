"""
Shared pytest fixtures for the mathcheck test suite.

This module provides:
- Fresh copies of the named contexts
- A seeded random source for formula sampling
- A helper for asserting pydantic validation errors
"""

import random
from typing import Any

import pytest
from pydantic import BaseModel, ValidationError

from mathcheck.math.context import get_context


@pytest.fixture
def numeric():
    return get_context("Numeric")


@pytest.fixture
def complex_context():
    return get_context("Complex")


@pytest.fixture
def point_context():
    return get_context("Point")


@pytest.fixture
def vector_context():
    return get_context("Vector")


@pytest.fixture
def matrix_context():
    return get_context("Matrix")


@pytest.fixture
def interval_context():
    return get_context("Interval")


@pytest.fixture
def full():
    return get_context("Full")


@pytest.fixture
def rng():
    """Seeded random source so formula test points are reproducible."""
    return random.Random(20240607)


@pytest.fixture
def assert_validation_error():
    """Helper to assert that a ValidationError is raised for a given field."""
    def _assert_validation(
        model_class: type[BaseModel],
        data: dict[str, Any],
        expected_field: str | None = None,
    ) -> ValidationError:
        with pytest.raises(ValidationError) as exc_info:
            model_class(**data)

        error = exc_info.value
        if expected_field:
            field_errors = [e for e in error.errors() if e["loc"] and e["loc"][0] == expected_field]
            assert field_errors, f"Expected error for field '{expected_field}' not found"
        return error

    return _assert_validation
