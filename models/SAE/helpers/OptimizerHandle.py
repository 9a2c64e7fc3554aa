from .errors import OwnershipViolationError


class OptimizerHandle:
    """Owning-or-borrowed reference to an optimizer.

    A handle is in one of three states: owned (``release()`` releases the
    optimizer), borrowed (``release()`` only forgets it) or empty. An owning
    handle marks its optimizer as ``owned``; a second owning handle for the
    same optimizer is refused. Ownership moves between handles with
    ``take()``, which leaves the source empty, so an optimizer is released at
    most once.
    """

    __slots__ = ("_optimizer", "_owns")

    def __init__(self, optimizer=None, owns=False):
        owns = bool(owns) and optimizer is not None
        if owns:
            if optimizer.owned:
                raise OwnershipViolationError(
                    f"{type(optimizer).__name__} already has an owner"
                )
            optimizer.owned = True
        self._optimizer = optimizer
        self._owns = owns

    @classmethod
    def owned(cls, optimizer):
        return cls(optimizer, owns=True)

    @classmethod
    def borrowed(cls, optimizer):
        return cls(optimizer, owns=False)

    @classmethod
    def empty(cls):
        return cls()

    @property
    def optimizer(self):
        return self._optimizer

    @property
    def owns(self):
        return self._owns

    @property
    def is_empty(self):
        return self._optimizer is None

    def take(self):
        """Move the reference and its ownership into a new handle."""
        moved = OptimizerHandle()
        moved._optimizer, moved._owns = self._optimizer, self._owns
        self._optimizer = None
        self._owns = False
        return moved

    def forget(self):
        """Empty the handle without releasing; ownership is given up."""
        if self._owns:
            self._optimizer.owned = False
        self._optimizer = None
        self._owns = False

    def release(self):
        """Release the optimizer if owned, then empty the handle."""
        optimizer, owns = self._optimizer, self._owns
        self._optimizer = None
        self._owns = False
        if owns:
            optimizer.owned = False
            optimizer.release()

    def __repr__(self):
        if self.is_empty:
            return "OptimizerHandle(empty)"
        kind = "owned" if self._owns else "borrowed"
        return f"OptimizerHandle({kind}, {type(self._optimizer).__name__})"
