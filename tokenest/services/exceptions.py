"""Domain-specific exceptions."""


class ServiceError(Exception):
    pass


class MalformedInputError(ServiceError):
    pass


class InputTooLargeError(ServiceError):
    pass


class InvalidRequestError(ServiceError):
    pass
