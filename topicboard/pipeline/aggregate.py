"""Stance grouping for resolved viewpoints."""

from typing import Dict, Iterable, List

from .models import DISPLAY_ORDER, Stance, StanceBuckets, StanceGroup, Viewpoint


def aggregate(viewpoints: Iterable[Viewpoint]) -> StanceBuckets:
    """
    Stable partition of viewpoints into For / Against / Mixed.

    Members keep the order they arrived in. Viewpoints with an unrecognized
    stance are set aside in ``unrecognized`` rather than dropped.
    """
    members: Dict[Stance, List[Viewpoint]] = {stance: [] for stance in DISPLAY_ORDER}
    unrecognized: List[Viewpoint] = []

    for viewpoint in viewpoints:
        if viewpoint.stance in members:
            members[viewpoint.stance].append(viewpoint)
        else:
            unrecognized.append(viewpoint)

    return StanceBuckets(
        groups=tuple(StanceGroup(stance, tuple(members[stance])) for stance in DISPLAY_ORDER),
        unrecognized=tuple(unrecognized),
    )
