from __future__ import annotations


class BridgeError(Exception):
    """Base class for failures the relay knows how to report."""


class ConfigurationError(BridgeError):
    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Missing required environment variables: {', '.join(missing)}")


class ProviderError(BridgeError):
    """YourGPT answered, but not with a success status."""


class ProviderUnavailable(BridgeError):
    def __init__(self, message: str = "YourGPT service unavailable") -> None:
        super().__init__(message)


class InvalidSignature(BridgeError):
    def __init__(self, message: str = "Invalid signature") -> None:
        super().__init__(message)


class ValidationError(BridgeError):
    pass
