"""
Graph surgery: removing and re-inserting seams.

Removing a seam pixel relinks its neighbors around it. Depending on
where the seam came from in the previous lane, the lane that used to
pass through the pixel also has to be rerouted:

- straight:    predecessor directly behind the pixel; only the lane closes up
- drift left:  predecessor behind-and-after; the pixel after it takes over
               the pixel's back link
- drift right: predecessor behind-and-before; the pixel before it takes over
               the pixel's back link

For a vertical seam "behind" is up and "after" is right, for a
horizontal seam "behind" is left and "after" is down.

The removed pixel's own links are never touched, so re-inserting it is
just a matter of pointing its four recorded neighbors back at it. This is
exact as long as seams are re-inserted in reverse order of removal.
"""

import logging
from enum import Enum
from typing import List

from .errors import MalformedSeamError
from .grid import BORDER, PixelGrid
from .seam import SeamEntry, SeamPath

logger = logging.getLogger(__name__)


class Slide(Enum):
    STRAIGHT = 'straight'
    DRIFT_LEFT = 'drift_left'
    DRIFT_RIGHT = 'drift_right'


def classify(grid: PixelGrid, seam: SeamPath) -> List[Slide]:
    """
    How each seam entry sits relative to its predecessor.

    Raises:
        MalformedSeamError: if a predecessor is not adjacent to its entry
    """
    back, before, after = seam.axis.back, seam.axis.before, seam.axis.after
    slides = []
    for position, entry in enumerate(seam.entries):
        came_from = seam.predecessor(position)
        if came_from is None:
            slides.append(Slide.STRAIGHT)
            continue

        behind = grid.neighbor(entry.pixel, back)
        if came_from.pixel == behind:
            slides.append(Slide.STRAIGHT)
        elif came_from.pixel == grid.neighbor(behind, after):
            slides.append(Slide.DRIFT_LEFT)
        elif came_from.pixel == grid.neighbor(behind, before):
            slides.append(Slide.DRIFT_RIGHT)
        else:
            raise MalformedSeamError(
                f"{seam.axis.value} seam entry {position} (pixel {entry.pixel}) "
                f"is not adjacent to its predecessor {came_from.pixel}")
    return slides


def _locate(lane: List[int], entry: SeamEntry, position: int) -> int:
    if 0 <= entry.index < len(lane) and lane[entry.index] == entry.pixel:
        return entry.index
    try:
        return lane.index(entry.pixel)
    except ValueError:
        raise MalformedSeamError(
            f"Seam pixel {entry.pixel} is not in lane {position}") from None


def remove_seam(grid: PixelGrid, seam: SeamPath) -> None:
    """
    Detach a seam from the grid, shrinking every lane by one.

    The seam is validated in full before any link changes, so a
    MalformedSeamError leaves the grid as it was.

    Args:
        grid: Pixel graph the seam was found on
        seam: Seam returned by `find_seam` for the current grid state
    """
    lanes = grid.lanes(seam.axis)
    if len(lanes) != len(seam):
        raise MalformedSeamError(
            f"{seam.axis.value} seam has {len(seam)} entries but the grid has "
            f"{len(lanes)} lanes")

    slides = classify(grid, seam)
    positions = [_locate(lane, entry, i)
                 for i, (lane, entry) in enumerate(zip(lanes, seam.entries))]

    back, before, after = seam.axis.back, seam.axis.before, seam.axis.after

    # Tail first: an entry is classified against the untouched lane behind it
    for entry, slide in zip(reversed(seam.entries), reversed(slides)):
        pixel = entry.pixel
        behind = grid.neighbor(pixel, back)
        first = grid.neighbor(pixel, before)
        second = grid.neighbor(pixel, after)

        grid.link(first, after, second)
        if slide is Slide.DRIFT_LEFT:
            grid.link(second, back, behind)
        elif slide is Slide.DRIFT_RIGHT:
            grid.link(first, back, behind)

    for lane, position in zip(lanes, positions):
        del lane[position]
    grid.set_lanes(seam.axis, lanes)

    logger.debug("Removed %s seam of %d pixels", seam.axis.value, len(seam))


def _insertion_point(lane: List[int], entry: SeamEntry, following: int) -> int:
    if following == BORDER:
        return len(lane)
    if entry.index < len(lane) and lane[entry.index] == following:
        return entry.index
    try:
        return lane.index(following)
    except ValueError:
        return len(lane)


def insert_seam(grid: PixelGrid, seam: SeamPath) -> None:
    """
    Re-insert a previously removed seam, growing every lane by one.

    Must be called on seams in reverse order of removal.
    """
    lanes = grid.lanes(seam.axis)
    if not lanes:
        # A collapsed axis leaves no lanes behind to insert into
        lanes = [[] for _ in seam.entries]
    elif len(lanes) != len(seam):
        raise MalformedSeamError(
            f"{seam.axis.value} seam has {len(seam)} entries but the grid has "
            f"{len(lanes)} lanes")

    after = seam.axis.after
    for lane, entry in zip(lanes, seam.entries):
        grid.reattach(entry.pixel)
        following = grid.neighbor(entry.pixel, after)
        lane.insert(_insertion_point(lane, entry, following), entry.pixel)
    grid.set_lanes(seam.axis, lanes)

    logger.debug("Inserted %s seam of %d pixels", seam.axis.value, len(seam))
