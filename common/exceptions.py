"""Custom exception classes shared by the server and the client."""


class P2PError(Exception):
    """
    Base exception class for all p2pshare errors.
    """
    pass


class ProtocolViolationError(P2PError):
    """
    Raised when a peer sends an op byte outside the known operation set.
    """

    def __init__(self, op_byte: int):
        super().__init__(f"Unknown op byte {op_byte}")
        self.op_byte = op_byte


class StreamClosedError(P2PError, ConnectionError):
    """
    Raised when the peer closes the stream before a read is satisfied.
    """

    def __init__(self, expected: int, received: int):
        super().__init__(
            f"Stream closed after {received} of {expected} expected bytes"
        )
        self.expected = expected
        self.received = received


class PoolCreationError(P2PError):
    """
    Raised when a worker pool is requested with fewer than one worker.
    """
    pass


class PoolClosedError(P2PError):
    """
    Raised when a job is submitted to a worker pool that has been shut down.
    """
    pass


class InvalidFileNameError(P2PError):
    """
    Raised when a file name has no usable base name (empty, '.' or '..').
    """
    pass
