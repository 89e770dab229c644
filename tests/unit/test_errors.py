"""Unit tests for the error hierarchy."""

from __future__ import annotations

import pytest

from eks_infra.utils.errors import (
    ConfigValidationError,
    InfraError,
    NodeGroupArgumentError,
    TagResolutionError,
)


@pytest.mark.parametrize(
    "error_cls", [ConfigValidationError, TagResolutionError, NodeGroupArgumentError]
)
def test_subclasses_value_error(error_cls: type) -> None:
    error = error_cls("boom", field="name")
    assert isinstance(error, InfraError)
    assert isinstance(error, ValueError)
    assert str(error) == "boom"
    assert error.field == "name"


def test_field_defaults_to_empty() -> None:
    assert InfraError("boom").field == ""
