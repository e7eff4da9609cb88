"""Error kinds raised and handled across the signal pipeline."""


class FXSignalError(Exception):
    """Base class for all fxsignal errors."""


class DataUnavailable(FXSignalError):
    """Price data could not be obtained or is too short to analyse."""


class NetworkError(DataUnavailable):
    """The quote provider could not be reached (transport or HTTP failure)."""


class FormatError(DataUnavailable):
    """The quote provider answered with a payload we cannot parse."""


class ComputationFailure(FXSignalError):
    """An indicator strategy raised unexpectedly.

    Carries the indicator name so the caller can substitute a neutral
    signal for that indicator only.
    """

    def __init__(self, indicator: str, cause: BaseException) -> None:
        super().__init__(f"{indicator} strategy failed: {cause}")
        self.indicator = indicator
        self.cause = cause
