class LockdropError(Exception):
    """Base class for rejected lockdrop operations. The ledger is left untouched."""

    def __init__(self, reason):
        super().__init__(reason)
        self.reason = reason


class PreconditionError(LockdropError):
    """The operation is not allowed in the current state or with these arguments."""
    pass


class TransferError(LockdropError):
    """An external asset transfer reported failure."""
    pass


class ArithmeticGuardError(LockdropError):
    """An invariant-protection guard tripped (e.g. division by zero total points)."""
    pass


class ReentrancyError(LockdropError):
    """An entry point was called while another operation was in progress."""
    pass


class AssetError(Exception):
    """Raised by an asset implementation that reports failure by raising."""
    pass
