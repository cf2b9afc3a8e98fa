from __future__ import annotations


class SidecarError(RuntimeError):
    """Base error for gateway sidecar operations (message is user-facing)."""


class ConfigurationMissing(SidecarError):
    """No API key configured (or the config could not be read)."""


class ExecutableNotFound(SidecarError):
    """The `openclaw` executable could not be located."""


class SpawnFailure(SidecarError):
    """The OS refused to launch the gateway process."""


class TerminationFailure(SidecarError):
    """Killing or reaping the gateway failed. Supervisor state is already cleared."""
