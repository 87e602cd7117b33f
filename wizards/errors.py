# wizards/errors.py


class WizardError(Exception):
    """
    Base error for every failure a request handler can surface.
    The server maps it to {"error": <message>} with status_code.
    """

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class MissingFieldError(WizardError):
    status_code = 400


class MissingInputError(WizardError):
    status_code = 400


class InvalidStepError(WizardError):
    status_code = 400


class RecordNotFoundError(WizardError):
    status_code = 404


class UnknownEndpointError(WizardError):
    status_code = 404


class GenerationFailedError(WizardError):
    status_code = 500


class GenerationTimeoutError(GenerationFailedError):
    status_code = 504


class ValidationFailure(Exception):
    """
    Generated text broke a declared constraint. Internal only: it drives the
    single corrective retry and is never returned to the caller.
    """

    def __init__(self, violations: list[str]):
        super().__init__("; ".join(violations))
        self.violations = violations
