"""Domain-specific errors for emuctl."""


class EmuctlError(Exception):
    """Base error for emuctl."""


class ExecutableNotFoundError(EmuctlError, FileNotFoundError):
    """Raised when an SDK tool binary cannot be located."""


class SdkNotFoundError(EmuctlError):
    """Raised when no Android SDK root is configured or discoverable."""


class DeviceCommunicationError(EmuctlError):
    """Raised when the adb daemon or a device command round-trip fails."""


class ProfileValidationError(EmuctlError):
    """Raised when a launch profile does not conform to schema or semantics."""


class ProfileLoadError(EmuctlError):
    """Raised when reading launch profile sources fails."""
