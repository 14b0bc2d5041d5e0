"""TrackCam exceptions."""


class TrackCamError(Exception):
    """Base exception for TrackCam."""


class ConfigError(TrackCamError):
    """Invalid configuration (bounds, bindings, sensitivities, initial frame)."""


class ValidationError(TrackCamError):
    """Input validation failed (e.g. malformed replay script or event dict)."""
