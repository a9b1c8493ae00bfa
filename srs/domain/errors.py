class SchedulerContractError(ValueError):
    """Raised when a caller hands the scheduler input it must never receive."""


class InvalidRatingError(SchedulerContractError):
    pass


class InvalidCardError(SchedulerContractError):
    pass


class InvalidParametersError(SchedulerContractError):
    pass
