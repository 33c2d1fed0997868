# dashdeck/errors.py
"""
Exception hierarchy for extension registration.

Configuration errors describe a programming mistake in an extension
(bad metadata, mismatched ids). Retrying never helps.
"""


class ExtensionError(Exception):
    """Base exception for extension-related errors."""
    pass


class ExtensionConfigError(ExtensionError, ValueError):
    """Raised when an extension declares invalid or inconsistent metadata."""
    pass


class InvalidWidgetScopeError(ExtensionConfigError):
    """Raised when a widget declares a scope token other than PROJECT or GLOBAL."""

    def __init__(self, scope: str, extension_type: str):
        self.scope = scope
        self.extension_type = extension_type
        super().__init__(f"Invalid widget scope {scope} for widget {extension_type}")


class DuplicateViewError(ExtensionConfigError):
    """Raised when a view id is registered twice."""

    def __init__(self, view_id: str):
        self.view_id = view_id
        super().__init__(f"View already registered: {view_id}")


class RegistryFrozenError(ExtensionError, RuntimeError):
    """Raised when registering into a frozen view registry."""
    pass
