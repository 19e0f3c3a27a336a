class HarnessError(Exception):
    """Base class for every error raised by the harness."""


class UnknownPlatform(HarnessError, KeyError):
    """Requested platform tag has no capability profile."""

    def __init__(self, platform):
        self.platform = platform
        super().__init__(f"Unknown platform: {platform!r}")

    def __str__(self):
        return self.args[0]


class ConfigurationError(HarnessError):
    """Environment or server configuration is missing or invalid."""


class ServerSpawnError(HarnessError):
    """The local Appium server could not be started."""


class SessionInitError(HarnessError):
    """The remote-control session was rejected, unreachable or never became ready."""


class SessionCancelled(SessionInitError):
    """Session establishment was aborted by the caller."""
