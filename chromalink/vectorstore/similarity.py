"""
Exact cosine-similarity ranking.

Pure functions with no I/O. Every query rescans the full candidate set
(O(n * d)); there is no index. Scores are computed in float32.
"""

from typing import Sequence

import numpy as np

from chromalink.errors import DimensionMismatch
from chromalink.vectorstore.models import ScoredDocument, StoredDocument


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity of two vectors.

    Returns 0.0 when either vector has zero norm, so NaN never reaches
    the sort.

    Raises:
        DimensionMismatch: If the vectors differ in length
    """
    if len(a) != len(b):
        raise DimensionMismatch(len(a), len(b), context="vector")

    va = np.asarray(a, dtype=np.float32)
    vb = np.asarray(b, dtype=np.float32)
    norm_a = float(np.linalg.norm(va))
    norm_b = float(np.linalg.norm(vb))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return float(np.dot(va, vb)) / (norm_a * norm_b)


def rank(
    query: Sequence[float],
    candidates: Sequence[StoredDocument],
    k: int,
) -> list[ScoredDocument]:
    """
    Rank candidates by cosine similarity to the query.

    Args:
        query: Query vector
        candidates: Documents to score, in insertion order
        k: Maximum number of results (clamped to len(candidates))

    Returns:
        Up to k results, highest score first. Equal scores keep insertion
        order, so repeated calls on the same input return the same order.

    Raises:
        DimensionMismatch: If a candidate embedding differs in length from the query
    """
    if k <= 0 or not candidates:
        return []

    dim = len(query)
    for doc in candidates:
        if len(doc.embedding) != dim:
            raise DimensionMismatch(dim, len(doc.embedding), context=f"document {doc.id!r}")

    q = np.asarray(query, dtype=np.float32)
    matrix = np.asarray([doc.embedding for doc in candidates], dtype=np.float32).reshape(
        len(candidates), dim
    )

    # Zero-norm rows and queries score 0.0 instead of NaN
    q_norm = float(np.linalg.norm(q))
    row_norms = np.linalg.norm(matrix, axis=1)
    denominators = row_norms * q_norm
    dots = matrix @ q
    scores = np.zeros(len(candidates), dtype=np.float32)
    np.divide(dots, denominators, out=scores, where=denominators != 0)

    order = np.argsort(-scores, kind="stable")[: min(k, len(candidates))]
    return [ScoredDocument(score=float(scores[i]), document=candidates[i]) for i in order]
