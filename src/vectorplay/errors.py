"""Exception taxonomy for vectorplay."""


class GameError(Exception):
    """Base class for errors surfaced to callers of the game services."""


class InputError(GameError):
    """Malformed player input: bad word, out-of-range position, bad difficulty."""


class NotFoundError(GameError):
    """Unknown game id."""


class StateError(GameError):
    """Action not allowed in the game's current state."""


class DependencyError(GameError):
    """An external collaborator (embeddings, storage) failed."""


class VectorMathError(ValueError):
    """Contract violation in vector arithmetic."""


class LengthMismatchError(VectorMathError):
    pass


class ZeroVectorError(VectorMathError):
    pass
