"""DependencyGraph — static field dependency graph on NetworkX.

Built once per loaded form from ``field -> fields it reads``. An edge
``a -> b`` means "b must be recomputed/re-checked when a changes".
Names that are read but never declared (external inputs) appear as
nodes too, so changes to them still propagate.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

import networkx as nx

type _Graph = nx.DiGraph


class DependencyGraph:
    """Topological ordering and change propagation over form fields."""

    def __init__(self, dependencies: Mapping[str, Iterable[str]]) -> None:
        self._graph = self._build(dependencies)
        self._rank = {name: i for i, name in enumerate(self._graph.nodes)}

    @property
    def graph(self) -> _Graph:
        return self._graph

    def _build(self, dependencies: Mapping[str, Iterable[str]]) -> _Graph:
        g: _Graph = nx.DiGraph()
        # Declared fields first, so node order is configuration order.
        for name in dependencies:
            g.add_node(name, declared=True)
        for name, reads in dependencies.items():
            for source in sorted(reads):
                if source == name:
                    continue
                if source not in g:
                    g.add_node(source, declared=False)
                g.add_edge(source, name)
        return g

    def order(self) -> list[str]:
        """All nodes, dependencies before dependents.

        Members of a cycle keep their configuration order.
        """
        condensed = nx.condensation(self._graph)
        members = {
            scc: sorted(condensed.nodes[scc]["members"], key=self._rank.__getitem__)
            for scc in condensed.nodes
        }
        ordered: list[str] = []
        for scc in nx.lexicographical_topological_sort(condensed, key=lambda n: self._rank[members[n][0]]):
            ordered.extend(members[scc])
        return ordered

    def affected_by(self, name: str) -> list[str]:
        """*name* plus everything downstream of it, in evaluation order."""
        if name not in self._graph:
            return [name]
        affected = nx.descendants(self._graph, name) | {name}
        return [node for node in self.order() if node in affected]

    def dependents(self, name: str) -> list[str]:
        """Fields that read *name* directly."""
        if name not in self._graph:
            return []
        return sorted(self._graph.successors(name), key=self._rank.__getitem__)

    def cycles(self) -> list[list[str]]:
        """Dependency cycles, each rotated to start at its earliest field."""
        found: list[list[str]] = []
        for cycle in nx.simple_cycles(self._graph):
            start = min(range(len(cycle)), key=lambda i: self._rank[cycle[i]])
            found.append(cycle[start:] + cycle[:start])
        return sorted(found, key=lambda c: [self._rank[n] for n in c])

    def is_declared(self, name: str) -> bool:
        return bool(self._graph.nodes[name].get("declared")) if name in self._graph else False
