# MIT License (see LICENSE)
"""
Partitioning of particles into independently integrable islands.

An island is a connected component of the graph whose nodes are particles and
whose edges are two-body force laws (springs, bungees). Integrating a
particle reads the live state of every particle it is linked to, so two
particles in the same island must not be integrated concurrently. Particles
in different islands share nothing and can be handed to different workers.

The engine never spawns workers itself; callers decide the granularity.
"""
from __future__ import annotations
from typing import TYPE_CHECKING, Iterable, List, Protocol, Set

if TYPE_CHECKING:
    from ..types import Particle


class LinkProtocol(Protocol):
    """Any law linking two particles."""
    a: "Particle"
    b: "Particle"


def find_islands(particles: Iterable["Particle"], links: Iterable[LinkProtocol]) -> List[List["Particle"]]:
    """
    Split particles into connected components of the link graph.

    Immovable particles are ordinary nodes: they still drift with their own
    velocity, so a particle linked to one reads state that changes.

    Args:
        particles: Every particle to partition.
        links: Two-body laws. Endpoints missing from `particles` are ignored.

    Returns:
        Islands in order of their lowest-id member; members sorted by id.
    """
    ordered = sorted(particles, key=lambda p: p.id)
    adj: dict[int, List["Particle"]] = {p.id: [] for p in ordered}

    # 1. Build interaction graph
    for link in links:
        if link.a.id in adj and link.b.id in adj:
            adj[link.a.id].append(link.b)
            adj[link.b.id].append(link.a)

    visited: Set[int] = set()
    islands: List[List["Particle"]] = []

    # 2. Traverse graph (DFS) to collect components
    for particle in ordered:
        if particle.id in visited:
            continue

        stack = [particle]
        visited.add(particle.id)
        island: List["Particle"] = []

        while stack:
            curr = stack.pop()
            island.append(curr)
            for neighbor in adj[curr.id]:
                if neighbor.id not in visited:
                    visited.add(neighbor.id)
                    stack.append(neighbor)

        island.sort(key=lambda p: p.id)
        islands.append(island)

    return islands
