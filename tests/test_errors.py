"""
Tests for the error taxonomy.
"""
import pytest

from computelab.errors import (
    ComputeLabError,
    ErrorCode,
    ErrorContext,
    InternalError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
    wrap_unexpected,
)


class TestErrorCodes:
    """Test error code enumeration."""

    def test_error_codes_are_strings(self):
        assert ErrorCode.MISSING_FIELD.value.startswith("ERR_")
        assert ErrorCode.NOT_FOUND.value.startswith("ERR_")

    def test_error_codes_unique(self):
        values = [e.value for e in ErrorCode]
        assert len(values) == len(set(values))


class TestErrorContext:

    def test_to_dict_flattens_extra(self):
        ctx = ErrorContext(job_id="job_1", operation="submit", extra={"attempt": 2})
        d = ctx.to_dict()

        assert d["job_id"] == "job_1"
        assert d["operation"] == "submit"
        assert d["attempt"] == 2


class TestHttpStatus:
    """Each error kind carries the status the HTTP adapter answers with."""

    @pytest.mark.parametrize(
        "error, status",
        [
            (ValidationError(), 400),
            (NotFoundError(), 404),
            (InvalidTransitionError("nope"), 409),
            (InternalError("boom"), 500),
            (ComputeLabError("boom"), 500),
        ],
    )
    def test_status(self, error, status):
        assert error.http_status == status
        assert isinstance(error, ComputeLabError)


class TestValidationError:

    def test_missing_names_every_field(self):
        error = ValidationError.missing(["toolkit", "config"])

        assert error.message == "Missing required fields: toolkit, config"
        assert error.fields == ["toolkit", "config"]
        assert error.code is ErrorCode.MISSING_FIELD

    def test_code_override_does_not_leak_to_class(self):
        ValidationError("bad", code=ErrorCode.INVALID_FIELD)
        assert ValidationError().code is ErrorCode.VALIDATION_ERROR


class TestNotFoundError:

    def test_defaults(self):
        error = NotFoundError(job_id="job_42")

        assert error.message == "Job not found"
        assert error.job_id == "job_42"
        assert str(error) == "[ERR_4040] Job not found (job_id=job_42)"

    def test_to_dict(self):
        d = NotFoundError(job_id="job_42").to_dict()

        assert d["error_type"] == "NotFoundError"
        assert d["code"] == "ERR_4040"
        assert d["context"]["job_id"] == "job_42"
        assert d["cause"] is None


class TestWrapUnexpected:

    def test_wraps_foreign_exception(self):
        cause = KeyError("results")
        wrapped = wrap_unexpected(cause, job_id="job_1", operation="tick")

        assert isinstance(wrapped, InternalError)
        assert wrapped.cause is cause
        assert wrapped.code is ErrorCode.INTERNAL_ERROR
        assert wrapped.context.job_id == "job_1"
        assert "KeyError" in wrapped.message

    def test_passes_domain_errors_through(self):
        error = InvalidTransitionError("no")
        assert wrap_unexpected(error) is error
