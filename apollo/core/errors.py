"""
Protocol Errors

Every operation is all-or-nothing: raising any of these aborts the
operation and rolls back all staged writes and transfers.
"""


class ProtocolError(Exception):
    """Base class for errors raised by the protocol core."""

    code = "ProtocolError"
    default_message = "Protocol operation failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(ProtocolError):
    code = "Unauthorized"
    default_message = "Caller does not have permission to perform this action"


class InvalidParameter(ProtocolError):
    code = "InvalidParameter"
    default_message = "Invalid parameter supplied to operation"


class InsufficientPoolBalance(ProtocolError):
    code = "InsufficientPoolBalance"
    default_message = "Insufficient funds in the premium pool to pay the claim"


class InvalidClaimStatus(ProtocolError):
    code = "InvalidClaimStatus"
    default_message = "Invalid claim status for this operation"


class ArithmeticOverflow(ProtocolError):
    code = "ArithmeticOverflow"
    default_message = "Arithmetic overflow"


class AlreadyInitialized(ProtocolError):
    code = "AlreadyInitialized"
    default_message = "Protocol configuration already exists"


class AlreadyEnrolled(ProtocolError):
    code = "AlreadyEnrolled"
    default_message = "Caller is already enrolled as a member"


class NotInitialized(ProtocolError):
    code = "NotInitialized"
    default_message = "Protocol has not been initialized"


class RecordNotFound(ProtocolError):
    code = "RecordNotFound"
    default_message = "Record not found"
