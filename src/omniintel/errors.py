"""Exception hierarchy for scanning, report generation and archive export."""

from __future__ import annotations


class OmniIntelError(Exception):
    """Base class for all errors raised by omniintel."""


class DiscoveryError(OmniIntelError):
    """The topic scan failed (network, quota, empty or unparseable response)."""


class GenerationError(OmniIntelError):
    """Report generation for a single topic failed."""


class ArchiveError(OmniIntelError):
    pass


class ArchiveInitError(ArchiveError):
    """The archive root could not be created."""


class SerializationError(ArchiveError):
    """The archive is empty or the compressor failed."""


class ExportCancelledError(OmniIntelError):
    """The export was stopped between two topics."""


class InvalidTransitionError(OmniIntelError):
    def __init__(self, state: object, event: object) -> None:
        super().__init__(f"Event {event} is not allowed in state {state}")
        self.state = state
        self.event = event
