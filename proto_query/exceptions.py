"""
Exception hierarchy for proto_query.

All errors raised by the library itself derive from ProtoBaseException.
Errors raised by caller supplied callbacks (predicates, selectors, reducers)
are never wrapped: they leave a traversal exactly as they were raised.
"""


class ProtoBaseException(Exception):
    """
    Root of every proto_query exception.

    :param code: optional numeric code identifying the failure
    :param exception_type: optional textual category
    :param message: human readable description
    """

    def __init__(self, code: int = None, exception_type: str = None, message: str = None):
        super().__init__(message)
        self.code = code
        self.exception_type = exception_type
        self.message = message

    def __str__(self):
        return self.message or self.__class__.__name__


class ProtoValidationException(ProtoBaseException, TypeError):
    """
    A rule was registered with an invalid argument (a non callable ordering
    function, a negative bound, an unknown policy key...).
    """


class ProtoNotSupportedException(ProtoBaseException, NotImplementedError):
    """
    The operation is part of the public surface but is not executed by the
    engine. Raised before any state is touched.
    """


class ProtoExecutionLimitException(ProtoBaseException):
    """
    A traversal went over a limit configured in its Policy.
    """
