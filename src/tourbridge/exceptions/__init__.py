"""
Custom exception hierarchy for tourbridge.

## Exception Hierarchy

```
TourBridgeError (base)
├── ServerError
│   ├── BindError
│   │   ├── AddressInUseError
│   │   ├── BindPermissionError
│   │   └── InvalidBindAddressError
│   └── AcceptError
├── SessionError
│   ├── ReadError
│   └── PeerClosedError
└── ConfigurationError
    ├── ConfigFileInvalidError
    └── ConfigValidationError
```

All custom exceptions inherit from `TourBridgeError`, which provides
`user_message`, `technical_message`, `recoverable` and `recovery_hint`.

Only `BindError` (and configuration errors) ever reach callers. Accept and
session errors are raised and handled inside the server threads: they are
logged and end at most one accept attempt or one connection.

Unknown control codes are not errors; the decoder drops them.
"""

from .base import TourBridgeError
from .config import ConfigFileInvalidError, ConfigurationError, ConfigValidationError
from .handlers import (
    ErrorContext,
    format_error_for_display,
    wrap_bind_error,
    wrap_pydantic_error,
)
from .server import (
    AcceptError,
    AddressInUseError,
    BindError,
    BindPermissionError,
    InvalidBindAddressError,
    PeerClosedError,
    ReadError,
    ServerError,
    SessionError,
)

__all__ = [
    "AcceptError",
    "AddressInUseError",
    "BindError",
    "BindPermissionError",
    "ConfigFileInvalidError",
    "ConfigValidationError",
    "ConfigurationError",
    "ErrorContext",
    "InvalidBindAddressError",
    "PeerClosedError",
    "ReadError",
    "ServerError",
    "SessionError",
    "TourBridgeError",
    "format_error_for_display",
    "wrap_bind_error",
    "wrap_pydantic_error",
]
