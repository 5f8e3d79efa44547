"""Domain exceptions: error codes, details and the API body."""

import pytest

from app.domain.exceptions import (
    ActionExecutionException,
    AuthenticationException,
    ConfigurationException,
    GuildhallException,
    ResourceNotFoundException,
    SqlNotConfiguredException,
    ValidationException,
)
from app.infrastructure.exceptions import (
    ExternalServiceException,
    ExternalServiceNotConfiguredException,
)


class TestGuildhallException:
    def test_defaults_error_code_to_class_name(self) -> None:
        exc = GuildhallException("boom")
        assert exc.error_code == "GuildhallException"
        assert exc.details == {}
        assert str(exc) == "boom"

    def test_to_dict_omits_empty_details(self) -> None:
        assert GuildhallException("boom", "X").to_dict() == {"error": "X", "message": "boom"}

    def test_to_dict_includes_details(self) -> None:
        body = ValidationException("Name is required", field="name").to_dict()
        assert body == {
            "error": "VALIDATION_ERROR",
            "message": "Name is required",
            "details": {"field": "name"},
        }


@pytest.mark.parametrize(
    ("exc", "code"),
    [
        (ValidationException("bad"), "VALIDATION_ERROR"),
        (AuthenticationException(), "AUTHENTICATION_ERROR"),
        (ResourceNotFoundException("automation", "a1"), "RESOURCE_NOT_FOUND"),
        (ActionExecutionException("send_email", "no template"), "ACTION_EXECUTION_ERROR"),
        (ConfigurationException("unknown op", key="approx"), "CONFIGURATION_ERROR"),
        (SqlNotConfiguredException(), "SERVICE_UNAVAILABLE"),
        (ExternalServiceException("n8n", "HTTP 502", 502), "EXTERNAL_SERVICE_ERROR"),
        (ExternalServiceNotConfiguredException("n8n", "N8N_BASE_URL"), "EXTERNAL_SERVICE_ERROR"),
    ],
)
def test_error_codes(exc, code) -> None:
    assert isinstance(exc, GuildhallException)
    assert exc.error_code == code


def test_resource_not_found_details() -> None:
    exc = ResourceNotFoundException("member", "m1")
    assert exc.message == "member not found: m1"
    assert exc.details == {"resource_type": "member", "resource_id": "m1"}


def test_action_execution_keeps_cause() -> None:
    exc = ActionExecutionException("create_task", "config.title is required")
    assert exc.message == "create_task failed: config.title is required"
    assert exc.action_type == "create_task"
    assert exc.cause == "config.title is required"


def test_external_service_details() -> None:
    exc = ExternalServiceException("mail_api", "HTTP 503", 503)
    assert exc.details == {"service": "mail_api", "reason": "HTTP 503", "status_code": 503}
    assert ExternalServiceNotConfiguredException("n8n", "N8N_BASE_URL").setting == "N8N_BASE_URL"
