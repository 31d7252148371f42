"""Tests for domain exceptions (error_code, message, details) and their HTTP status."""

from controlplus.core.exception_handlers import status_for
from controlplus.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    AuthProviderException,
    ControlPlusException,
    DataAccessDeniedException,
    ResourceNotFoundException,
    SubscriptionInactiveException,
    TenantScopeUnavailableException,
    ValidationException,
)


def test_base_exception_default_error_code() -> None:
    """Base ControlPlusException uses class name as error_code when not provided."""
    exc = ControlPlusException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "ControlPlusException"
    assert exc.details == {}


def test_to_dict_shape() -> None:
    exc = ControlPlusException("Oops", error_code="CUSTOM", details={"key": "value"})
    assert exc.to_dict() == {"error": "CUSTOM", "message": "Oops", "details": {"key": "value"}}


def test_validation_exception_with_and_without_field() -> None:
    assert ValidationException("Invalid", field="email").details == {"field": "email"}
    assert ValidationException("Invalid").details == {}


def test_authentication_exception_carries_provider_code() -> None:
    exc = AuthenticationException("Senha incorreta.", "auth/wrong-password")
    assert exc.error_code == "AUTHENTICATION_ERROR"
    assert exc.details == {"code": "auth/wrong-password"}
    assert AuthenticationException().message == "Authentication failed"


def test_authorization_exception_with_resource_and_action() -> None:
    exc = AuthorizationException(resource="clientes", action="write")
    assert exc.message == "Permission denied: write on clientes"
    assert exc.details == {"resource": "clientes", "action": "write"}


def test_auth_provider_exception_keeps_code() -> None:
    exc = AuthProviderException("auth/email-already-in-use")
    assert exc.code == "auth/email-already-in-use"
    assert exc.error_code == "AUTH_PROVIDER_ERROR"


def test_status_table() -> None:
    assert status_for(ValidationException("x")) == 400
    assert status_for(AuthenticationException()) == 401
    assert status_for(SubscriptionInactiveException("canceled")) == 402
    assert status_for(AuthorizationException()) == 403
    assert status_for(DataAccessDeniedException("users/a")) == 403
    assert status_for(TenantScopeUnavailableException("u1")) == 403
    assert status_for(ResourceNotFoundException("clientes", "c1")) == 404
    assert status_for(ControlPlusException("unmapped")) == 400
