"""Vector arithmetic for embedding similarity.

Inputs are plain sequences of floats (as returned by the embedding
provider); all work is done on float64 numpy arrays.
"""

from collections.abc import Sequence

import numpy as np

from ..errors import LengthMismatchError, ZeroVectorError

Vector = Sequence[float]

NORMALIZE_TOLERANCE = 1e-10


def _as_array(vector: Vector) -> np.ndarray:
    return np.asarray(vector, dtype=np.float64)


def _check_lengths(a: np.ndarray, b: np.ndarray) -> None:
    if a.shape != b.shape:
        raise LengthMismatchError(
            f"Vectors must have the same length ({a.size} != {b.size})"
        )


def dot_product(vector_a: Vector, vector_b: Vector) -> float:
    """Sum of element-wise products."""
    a, b = _as_array(vector_a), _as_array(vector_b)
    _check_lengths(a, b)
    return float(np.dot(a, b))


def magnitude(vector: Vector) -> float:
    """Euclidean norm; 0.0 for the zero vector."""
    return float(np.linalg.norm(_as_array(vector)))


def normalize_vector(vector: Vector) -> list[float]:
    """Scale a vector to unit length."""
    arr = _as_array(vector)
    mag = float(np.linalg.norm(arr))
    if mag == 0:
        raise ZeroVectorError("Cannot normalize zero vector")
    return (arr / mag).tolist()


def cosine_similarity(vector_a: Vector, vector_b: Vector) -> float:
    """Cosine of the angle between two vectors, in [-1, 1]."""
    a, b = _as_array(vector_a), _as_array(vector_b)
    _check_lengths(a, b)

    mag_a = float(np.linalg.norm(a))
    mag_b = float(np.linalg.norm(b))
    if mag_a == 0 or mag_b == 0:
        raise ZeroVectorError("Cannot calculate similarity with zero vectors")

    similarity = float(np.dot(a, b)) / (mag_a * mag_b)
    # Rounding can push identical vectors a hair past 1.
    return max(-1.0, min(1.0, similarity))


def cosine_similarity_batch(query: Vector, vectors: np.ndarray) -> np.ndarray:
    """Similarity of ``query`` against every row of ``vectors``.

    Rows with zero magnitude score 0.0. A zero query is a contract
    violation, same as in :func:`cosine_similarity`.
    """
    q = _as_array(query)
    matrix = np.asarray(vectors, dtype=np.float64)
    if matrix.size == 0:
        return np.zeros(0, dtype=np.float64)
    if matrix.ndim != 2 or matrix.shape[1] != q.size:
        raise LengthMismatchError(
            f"Query has {q.size} dimensions, matrix rows have "
            f"{matrix.shape[-1] if matrix.ndim else 0}"
        )

    query_norm = float(np.linalg.norm(q))
    if query_norm == 0:
        raise ZeroVectorError("Cannot calculate similarity with zero vectors")

    row_norms = np.linalg.norm(matrix, axis=1)
    similarities = np.zeros(matrix.shape[0], dtype=np.float64)
    mask = row_norms > 0
    similarities[mask] = (matrix[mask] @ q) / (row_norms[mask] * query_norm)
    return np.clip(similarities, -1.0, 1.0)
