from __future__ import annotations


class PlaygroundError(Exception):
    """Base class for failures raised by the drawing and imaging helpers."""


class AllocationFailure(PlaygroundError):
    """A drawing context or its backing buffer could not be created."""


class EncodeFailure(PlaygroundError):
    """An image could not be serialized to the requested container format."""


class DecodeFailure(PlaygroundError):
    """Image bytes could not be read back into a pixel buffer."""


class WriteFailure(PlaygroundError):
    """Encoded bytes could not be written to their destination."""


class AssetNotFoundError(PlaygroundError):
    """No bundled asset exists under the requested name."""


class ContextStateError(PlaygroundError):
    """A drawing context was used in a state that does not allow the call."""
