"""
Column orderings for sparse QR.

The R factor of X P has the same pattern as the Cholesky factor of
P'X'XP, so fill in R is controlled by ordering the columns of X on the
column intersection graph: columns i and j are adjacent when some row of
X has a nonzero in both. Only the pattern is used here. X'X is never
formed numerically.

Available orderings:
    natural: keep the columns as given
    rcm: reverse Cuthill-McKee (bandwidth/profile reduction, SciPy)
    min_degree: greedy minimum degree on the column graph (fill reduction)
"""

import heapq
from typing import Literal, Any
import numpy as np
import scipy.sparse as sp
from numpy.typing import NDArray
from scipy.sparse.csgraph import reverse_cuthill_mckee


OrderingChoice = Literal['natural', 'rcm', 'min_degree']

ORDERINGS: tuple[str, ...] = ('natural', 'rcm', 'min_degree')


def dense_threshold(size: int) -> int:
    """
    Count above which a row (or graph node) is treated as dense.

    max(16, 10 * sqrt(size)), the default dense control of COLAMD/AMD.
    """
    return max(16, int(10 * np.sqrt(size)))


def column_intersection_graph(X: sp.csc_matrix) -> sp.csr_matrix:
    """
    Pattern of X'X without the diagonal, as a symmetric CSR matrix.

    Dense rows of X are skipped: each would make its columns a clique
    and swamp the graph without informing the ordering.

    Args:
        X: Sparse matrix (n x p)

    Returns:
        p x p CSR matrix with unit entries where columns share a row
    """
    p = X.shape[1]
    pattern = sp.csr_matrix(X, dtype=np.float64, copy=True)
    pattern.data[:] = 1.0

    row_counts = np.diff(pattern.indptr)
    keep = row_counts <= dense_threshold(p)
    if not np.all(keep):
        pattern = pattern[keep]

    G = (pattern.T @ pattern).tocsr()
    G = (sp.triu(G, k=1) + sp.tril(G, k=-1)).tocsr()
    G.data[:] = 1.0
    return G


def minimum_degree(G: sp.csr_matrix) -> NDArray[np.intp]:
    """
    Greedy minimum-degree ordering of a symmetric graph.

    Repeatedly eliminates the node of smallest current degree (ties go to
    the lowest index) and turns its neighbourhood into a clique, which
    models the fill the elimination creates. Nodes whose initial degree
    exceeds dense_threshold are ordered last, in their original order.

    Args:
        G: Symmetric adjacency pattern (p x p), no diagonal

    Returns:
        Permutation of range(p)
    """
    p = G.shape[0]
    limit = dense_threshold(p)
    degrees = np.diff(G.indptr)
    dense_nodes = [int(v) for v in np.flatnonzero(degrees > limit)]
    dense_set = set(dense_nodes)

    adj: list[set[int]] = []
    for v in range(p):
        nbrs = G.indices[G.indptr[v]:G.indptr[v + 1]]
        adj.append({int(u) for u in nbrs if int(u) not in dense_set})

    heap = [(len(adj[v]), v) for v in range(p) if v not in dense_set]
    heapq.heapify(heap)
    eliminated = np.zeros(p, dtype=bool)
    order: list[int] = []

    while heap:
        degree, v = heapq.heappop(heap)
        if eliminated[v] or degree != len(adj[v]):
            # Stale entry
            continue
        eliminated[v] = True
        order.append(v)

        nbrs = adj[v]
        for u in nbrs:
            adj[u].discard(v)
            adj[u].update(w for w in nbrs if w != u)
        for u in nbrs:
            heapq.heappush(heap, (len(adj[u]), u))
        adj[v] = set()

    order.extend(dense_nodes)
    return np.asarray(order, dtype=np.intp)


def column_ordering(
    X: Any,
    method: OrderingChoice = 'min_degree',
) -> NDArray[np.intp]:
    """
    Compute a column permutation for sparse QR of X.

    Args:
        X: Sparse matrix (n x p)
        method: 'natural', 'rcm' or 'min_degree'

    Returns:
        Permutation q such that X[:, q] is factorized

    Raises:
        ValueError: If method is not a known ordering
    """
    if method not in ORDERINGS:
        raise ValueError(
            f"Unknown ordering: {method!r}. Expected one of {ORDERINGS}"
        )

    p = X.shape[1]
    if method == 'natural' or p <= 1:
        return np.arange(p, dtype=np.intp)

    G = column_intersection_graph(X)

    if method == 'rcm':
        return np.asarray(
            reverse_cuthill_mckee(G, symmetric_mode=True), dtype=np.intp
        )

    return minimum_degree(G)
