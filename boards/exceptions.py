"""
Failure kinds raised by the check-in engine.

Views turn these into the JSON error envelope; nothing here is swallowed.
"""


class BoardsError(Exception):
    code = 'ERROR'
    status = 400
    default_message = 'Request failed.'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(BoardsError):
    """Board or check-in is absent or belongs to someone else."""
    code = 'NOT_FOUND'
    status = 404
    default_message = 'Not found.'


class FutureDateError(BoardsError):
    code = 'FUTURE_DATE'
    status = 400
    default_message = 'Cannot check in for future dates.'


class ConcurrentUpdateConflict(BoardsError):
    """The board changed under us; retried before it reaches a caller."""
    code = 'CONCURRENT_UPDATE'
    status = 409
    default_message = 'The board was updated concurrently. Please retry.'
