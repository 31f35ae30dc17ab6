"""
Error types raised by launchkit backend services.
"""

from typing import Optional


class LaunchKitError(Exception):
    pass


class StructuralConfigError(LaunchKitError):
    """A catalog document does not have the expected shape."""

    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        super().__init__(f"Wrong components index structure at {path}: {message}")


class DiscoveryError(LaunchKitError):
    """Steam is expected (launched under Steam) but its install cannot be found."""
    pass


class NotFoundError(LaunchKitError):
    """No runner or version matches the requested name."""

    def __init__(self, name: str, kind: Optional[str] = None):
        self.name = name
        self.kind = kind
        what = f"{kind} component" if kind else "component"
        super().__init__(f"No {what} named '{name}'")
