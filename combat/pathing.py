from collections import deque
from typing import Container, Dict

from .battlefield import Battlefield
from .model import Point

def distances_from(battlefield: Battlefield, origin: Point, blocked: Container[Point]) -> Dict[Point, int]:
    """Breadth-first step counts from ``origin`` to every reachable open cell.

    ``blocked`` holds occupied cells. The origin is always the search root,
    even when it is occupied itself.
    """
    dist: Dict[Point, int] = {origin: 0}
    q: deque = deque([origin])
    while q:
        p = q.popleft()
        for n in battlefield.orthogonal_neighbors(p):
            if n in dist or n in blocked or not battlefield.is_open(n):
                continue
            dist[n] = dist[p] + 1
            q.append(n)
    return dist
