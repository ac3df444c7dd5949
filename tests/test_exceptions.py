"""Tests for the exception hierarchy and error helpers."""

import errno
import logging
import socket

import pytest
from pydantic import ValidationError

from tourbridge.exceptions import (
    AcceptError,
    AddressInUseError,
    BindError,
    BindPermissionError,
    ConfigFileInvalidError,
    ConfigurationError,
    ConfigValidationError,
    ErrorContext,
    InvalidBindAddressError,
    PeerClosedError,
    ReadError,
    ServerError,
    SessionError,
    TourBridgeError,
    format_error_for_display,
    wrap_bind_error,
    wrap_pydantic_error,
)
from tourbridge.models import BridgeConfig


@pytest.mark.unit
class TestHierarchy:
    """Every error is a TourBridgeError."""

    @pytest.mark.parametrize(
        "error,parent",
        [
            (AddressInUseError("127.0.0.1", 50500), BindError),
            (BindPermissionError("127.0.0.1", 80), BindError),
            (InvalidBindAddressError("1.2.3.4", 50500), BindError),
            (BindError("127.0.0.1", 50500), ServerError),
            (AcceptError(1, "boom"), ServerError),
            (ReadError("10.0.0.1:1234", "reset"), SessionError),
            (PeerClosedError("10.0.0.1:1234"), SessionError),
            (ConfigFileInvalidError("c.json", "bad"), ConfigurationError),
            (ConfigValidationError("port", 1, "bad"), ConfigurationError),
        ],
    )
    def test_parents(self, error, parent):
        assert isinstance(error, parent)
        assert isinstance(error, TourBridgeError)

    def test_bind_errors_are_fatal(self):
        assert not AddressInUseError("127.0.0.1", 50500).recoverable

    def test_session_errors_are_recoverable(self):
        assert ReadError("peer", "reset").recoverable
        assert PeerClosedError("peer").recoverable
        assert AcceptError(1, "boom").recoverable

    def test_str_is_user_message(self):
        error = AddressInUseError("127.0.0.1", 50500, "[Errno 98] Address already in use")
        assert str(error) == "Port 50500 on 127.0.0.1 is already in use"
        assert "Errno 98" in error.technical_message

    def test_log_line_joins_messages(self):
        error = ReadError("10.0.0.5:40123", "reset by peer")
        assert error.log_line == f"{error.user_message}: {error.technical_message}"
        assert "reset by peer" in error.log_line

    def test_log_line_without_details(self):
        assert TourBridgeError("plain").log_line == "plain"

    def test_details_are_keyword_only(self):
        with pytest.raises(TypeError):
            TourBridgeError("plain", "details")

    def test_technical_message_defaults_to_user_message(self):
        error = TourBridgeError("plain")
        assert error.technical_message == "plain"
        assert error.recovery_hint is None


@pytest.mark.unit
class TestWrapBindError:
    """Socket errors mapped to BindError subclasses."""

    def test_address_in_use(self):
        error = wrap_bind_error(OSError(errno.EADDRINUSE, "Address already in use"), "127.0.0.1", 50500)
        assert type(error) is AddressInUseError
        assert error.host == "127.0.0.1"
        assert error.port == 50500

    def test_permission_denied(self):
        error = wrap_bind_error(PermissionError(errno.EACCES, "Permission denied"), "0.0.0.0", 80)
        assert type(error) is BindPermissionError

    def test_address_not_available(self):
        error = wrap_bind_error(OSError(errno.EADDRNOTAVAIL, "Cannot assign"), "192.0.2.1", 50500)
        assert type(error) is InvalidBindAddressError

    def test_resolver_failure(self):
        error = wrap_bind_error(socket.gaierror(-2, "Name or service not known"), "nope", 50500)
        assert type(error) is InvalidBindAddressError

    def test_bad_argument(self):
        error = wrap_bind_error(TypeError("str expected"), None, 50500)
        assert type(error) is InvalidBindAddressError

    def test_other_errors(self):
        error = wrap_bind_error(OSError(errno.EMFILE, "Too many open files"), "127.0.0.1", 50500)
        assert type(error) is BindError
        assert "Too many open files" in error.technical_message


@pytest.mark.unit
class TestWrapPydanticError:
    """Validation errors mapped to configuration errors."""

    def test_single_field(self):
        with pytest.raises(ValidationError) as exc_info:
            BridgeConfig(port=70000)

        error = wrap_pydantic_error(exc_info.value, "config.json")
        assert isinstance(error, ConfigValidationError)
        assert error.field == "port"
        assert "65535" in error.recovery_hint

    def test_multiple_fields(self):
        with pytest.raises(ValidationError) as exc_info:
            BridgeConfig(port=-1, recv_size=0)

        error = wrap_pydantic_error(exc_info.value, "config.json")
        assert isinstance(error, ConfigValidationError)
        assert error.field == "multiple fields"

    def test_invalid_json(self):
        with pytest.raises(ValidationError) as exc_info:
            BridgeConfig.model_validate_json('{"port": 1,}')

        error = wrap_pydantic_error(exc_info.value, "config.json")
        assert isinstance(error, ConfigFileInvalidError)
        assert error.file_path == "config.json"


@pytest.mark.unit
class TestDisplayHelpers:
    """format_error_for_display and ErrorContext."""

    def test_format_custom_error(self):
        message, hint = format_error_for_display(AddressInUseError("127.0.0.1", 50500))
        assert message == "Port 50500 on 127.0.0.1 is already in use"
        assert "--port" in hint

    def test_format_builtin_error(self):
        message, hint = format_error_for_display(ValueError("bad value"))
        assert message == "ValueError: bad value"
        assert hint is None

    def test_error_context_reraises(self, caplog):
        with caplog.at_level(logging.ERROR):
            with pytest.raises(AddressInUseError):
                with ErrorContext("start server"):
                    raise AddressInUseError("127.0.0.1", 50500)

        assert "Failed to start server" in caplog.text

    def test_error_context_records_unexpected_error(self, caplog):
        context = ErrorContext("decode chunk")
        with caplog.at_level(logging.ERROR):
            with pytest.raises(RuntimeError):
                with context:
                    raise RuntimeError("boom")

        assert isinstance(context.error, RuntimeError)
        assert "Failed to decode chunk: boom" in caplog.text

    def test_error_context_success(self):
        with ErrorContext("noop") as context:
            pass
        assert context.error is None
