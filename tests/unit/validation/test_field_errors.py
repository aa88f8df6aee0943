"""Tests for field-scoped validation errors."""

from __future__ import annotations

from pydantic import ValidationError
import pytest

from clustersmith.core.types import InstallConfig
from clustersmith.core.validation import (
    ErrorType,
    FieldError,
    FieldErrorList,
    FieldPath,
    from_validation_error,
)


class TestFieldPath:
    def test_child_and_index(self):
        path = FieldPath("compute").index(0).child("platform", "aws", "zones")
        assert str(path) == "compute[0].platform.aws.zones"

    def test_equality(self):
        assert FieldPath("platform", "aws") == FieldPath("platform").child("aws")
        assert len({FieldPath("a"), FieldPath("a")}) == 1


class TestRendering:
    """Tests for the user-facing error strings."""

    def test_required(self):
        error = FieldError.required(FieldPath("platform", "aws", "region"), "region required")
        assert str(error) == "platform.aws.region: Required value: region required"

    def test_invalid_quotes_value(self):
        error = FieldError.invalid(FieldPath("baseDomain"), "Example..com", "invalid domain")
        assert str(error) == 'baseDomain: Invalid value: "Example..com": invalid domain'

    def test_not_supported_lists_choices(self):
        error = FieldError.not_supported(FieldPath("controlPlane", "name"), "main", ["master"])
        assert str(error) == (
            'controlPlane.name: Unsupported value: "main": supported values: "master"'
        )

    def test_duplicate_without_detail(self):
        error = FieldError.duplicate(FieldPath("compute").index(1).child("name"), "worker")
        assert str(error) == 'compute[1].name: Duplicate value: "worker"'

    def test_single_error_list_renders_bare(self):
        errors = FieldErrorList([FieldError.forbidden(FieldPath("extra"), "not allowed")])
        assert str(errors) == "extra: Forbidden: not allowed"

    def test_multiple_errors_bracketed(self):
        errors = FieldErrorList(
            [
                FieldError.required(FieldPath("a"), "x"),
                FieldError.required(FieldPath("b"), "y"),
            ]
        )
        assert str(errors) == "[a: Required value: x, b: Required value: y]"
        assert errors.fields == ["a", "b"]


class TestFromValidationError:
    """Tests for converting schema errors."""

    def _errors(self, document) -> FieldErrorList:
        with pytest.raises(ValidationError) as exc_info:
            InstallConfig.model_validate(document)
        return from_validation_error(exc_info.value)

    def test_unknown_field_forbidden(self):
        errors = self._errors({"metadata": {"name": "demo"}, "baseDomian": "example.com"})

        assert errors.fields == ["baseDomian"]
        assert errors[0].type is ErrorType.FORBIDDEN

    def test_missing_uses_aliased_location(self):
        errors = self._errors({"compute": [{"name": "worker"}, {"replicas": 1}]})

        assert errors.fields == ["compute[1].name"]
        assert errors[0].type is ErrorType.REQUIRED

    def test_wrong_type_is_invalid(self):
        errors = self._errors({"controlPlane": {"name": "master", "replicas": "three"}})

        assert errors.fields == ["controlPlane.replicas"]
        assert errors[0].type is ErrorType.INVALID
        assert errors[0].value == "three"
