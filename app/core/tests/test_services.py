"""
Tests for ServiceResult and BaseService.
"""

import logging

import pytest

from core.exceptions import BaseApplicationError
from core.services import BaseService, ServiceResult


class TestServiceResult:
    def test_success(self):
        result = ServiceResult.success(42)

        assert result.success
        assert bool(result) is True
        assert result.data == 42
        assert result.error is None

    def test_ok_is_success(self):
        assert ServiceResult.ok("x") == ServiceResult.success("x")

    def test_failure(self):
        result = ServiceResult.failure(
            "Bad quantity",
            error_code="VALIDATION_ERROR",
            errors={"quantity": ["too small"]},
        )

        assert not result
        assert result.error_code == "VALIDATION_ERROR"
        assert result.errors == {"quantity": ["too small"]}

    def test_bind_chains_success(self):
        result = ServiceResult.success(2).bind(lambda n: ServiceResult.success(n * 10))

        assert result.data == 20

    def test_bind_short_circuits_failure(self):
        failure = ServiceResult.failure("missing", error_code="NOT_FOUND")
        calls = []

        result = failure.bind(lambda value: calls.append(value))

        assert result is failure
        assert calls == []

    def test_bind_forwards_step_failure(self):
        result = ServiceResult.success(1).bind(
            lambda _: ServiceResult.failure("not ready", error_code="PROJECT_NOT_READY")
        )

        assert result.error_code == "PROJECT_NOT_READY"

    def test_map(self):
        assert ServiceResult.success(3).map(str).data == "3"

        failure = ServiceResult.failure("nope")
        assert failure.map(str) is failure

    def test_from_application_error_keeps_details(self):
        exc = BaseApplicationError(
            "Card declined", error_code="CARD", details={"decline_code": "lost_card"}
        )

        result = ServiceResult.from_exception(exc, "PROCESSOR_ERROR")

        assert result.error == "Card declined"
        assert result.error_code == "PROCESSOR_ERROR"
        assert result.details["details"] == {"decline_code": "lost_card"}

    def test_from_other_exception_uses_class_name(self):
        result = ServiceResult.from_exception(KeyError("x"))

        assert result.error_code == "KEYERROR"
        assert result.details is None

    def test_to_response(self):
        assert ServiceResult.success({"a": 1}).to_response() == {
            "success": True,
            "data": {"a": 1},
        }

        response = ServiceResult.failure(
            "Invalid", error_code="VALIDATION_ERROR", errors={"f": ["e"]}
        ).to_response()
        assert response == {
            "success": False,
            "error": "Invalid",
            "error_code": "VALIDATION_ERROR",
            "errors": {"f": ["e"]},
        }


class ExampleService(BaseService):
    pass


class TestBaseService:
    def test_logger_named_after_service(self):
        assert ExampleService.get_logger().name == f"{__name__}.ExampleService"

    def test_handle_exception_logs_and_converts(self, caplog):
        with caplog.at_level(logging.WARNING):
            result = ExampleService.handle_exception(
                ValueError("boom"),
                "Doing work",
                error_code="UNEXPECTED",
                log_level=logging.WARNING,
            )

        assert result.error_code == "UNEXPECTED"
        assert "Doing work: boom" in caplog.text

    def test_atomic_rolls_back(self, db):
        from authentication.models import User

        with pytest.raises(RuntimeError):
            with ExampleService.atomic():
                User.objects.create_user(email="rollback@example.com", password="pw")
                raise RuntimeError("abort")

        assert not User.objects.filter(email="rollback@example.com").exists()
