"""
Service-layer exceptions

Services raise these; the FastAPI exception handlers in main.py turn them
into response envelopes with the matching status code.
"""


class ServiceError(Exception):
    """Base error for expected, user-facing service failures"""
    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class BadRequestError(ServiceError):
    status_code = 400


class NotFoundError(ServiceError):
    status_code = 404


class ConflictError(ServiceError):
    status_code = 409


class ContractRetrievalError(ServiceError):
    """Contract storage could not be queried"""
    status_code = 503
