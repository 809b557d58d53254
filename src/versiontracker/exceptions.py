"""VersionTracker exception hierarchy.

All public exceptions inherit from VersionTrackerError, giving callers a
single base class to catch when they want to handle any VersionTracker
failure without swallowing unrelated errors.

Note that a component that simply is not integrated in a build is *not* an
error: probes report it as an absent result and log a diagnostic line.
"""


class VersionTrackerError(Exception):
    """Base exception for all VersionTracker errors."""


class ProbeError(VersionTrackerError):
    """Raised inside a probe when its source exists but cannot be read.

    The resolver catches it (like any other probe fault) and records the
    component as absent, so it never escapes a resolution pass.
    """


class RegistryError(VersionTrackerError):
    """Raised when the component registry is misconfigured.

    Covers duplicate component names and descriptors that declare no
    probe at all.
    """


class ConfigError(VersionTrackerError):
    """Raised when a registry or settings configuration file is invalid.

    Covers unreadable files, malformed YAML, and unknown probe kinds.
    """


class PersistenceError(VersionTrackerError):
    """Raised when a snapshot document has an unexpected shape.

    The store converts it into an absent read result; it only reaches
    callers that use the serializer functions directly.
    """
