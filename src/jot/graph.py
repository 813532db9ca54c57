"""Link graph of the vault, built with :mod:`networkx`.

Nodes are note paths (with a ``title`` attribute); a directed edge ``a -> b``
means note ``a`` contains a link that resolves to note ``b``. Links that do
not resolve to a note are left out.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import networkx as nx

if TYPE_CHECKING:
    from jot.vault import Vault


def build_graph(vault: "Vault") -> nx.DiGraph:
    """Return the directed link graph of every note in *vault*."""
    G: nx.DiGraph = nx.DiGraph()
    for path, note in vault.notes.items():
        G.add_node(path, title=note.title)
    for source, note in vault.notes.items():
        for link in note.links:
            target = vault.resolve_link(link.target)
            if target is not None and target.path != source:
                G.add_edge(source, target.path)
    return G


def local_graph(graph: nx.DiGraph, center: Path) -> nx.DiGraph:
    """The sub-graph of *center* and the notes it links to or is linked from."""
    center = Path(center)
    if center not in graph:
        return nx.DiGraph()
    neighbours = {center, *graph.successors(center), *graph.predecessors(center)}
    local = graph.subgraph(neighbours).copy()
    # keep only edges touching the center
    local.remove_edges_from([(a, b) for a, b in list(local.edges()) if center not in (a, b)])
    return local


def edges(graph: nx.DiGraph) -> list[tuple[Path, Path]]:
    """``(source, target)`` pairs, sorted for stable display."""
    return sorted(graph.edges())


def connections(graph: nx.DiGraph, path: Path) -> int:
    """Number of links into and out of *path*."""
    path = Path(path)
    return int(graph.degree(path)) if path in graph else 0
