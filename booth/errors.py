class BoothError(Exception):
    pass


class DeviceUnavailable(BoothError):
    """No camera stream could be claimed. The caller may retry."""


class CaptureFailure(BoothError):
    """A single shot could not be read from the camera."""


class CompositionFailure(BoothError):
    pass


class DeliveryFailure(BoothError):
    """The remote upload did not produce a usable URL."""


class SessionBusy(BoothError):
    pass


class InvalidTransition(BoothError):
    def __init__(self, phase: str, event: str):
        super().__init__(f"Event {event} is not valid in phase {phase}")
        self.phase = phase
        self.event = event
