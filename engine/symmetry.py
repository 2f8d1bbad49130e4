"""
Rotation and reflection variants of template coordinate sets.
"""

from typing import List, Sequence, Tuple, Union

from .templates import Offset, ShapeTemplate


def rotate_position(pos: Offset, times: int = 1) -> Offset:
    """Rotate a relative position by ``times`` quarter turns: (x, y) -> (-y, x)."""
    x, y = pos
    for _ in range(times % 4):
        x, y = -y, x
    return (x, y)


def flip_horizontal(pos: Offset) -> Offset:
    """Mirror a relative position across the vertical axis."""
    return (-pos[0], pos[1])


def expand(shape: Union[ShapeTemplate, Sequence[Offset]]) -> List[List[Offset]]:
    """
    Generate the 8 rotation/reflection variants of a coordinate set.

    Order: identity, 90/180/270 degree rotations, then the horizontal flip
    followed by its 90/180/270 degree rotations. Point order inside each
    variant follows the input. Symmetric shapes yield repeated variants;
    those are kept.
    """
    positions = list(shape.positions) if isinstance(shape, ShapeTemplate) else list(shape)

    variants = [positions]
    for rotation in range(1, 4):
        variants.append([rotate_position(p, rotation) for p in positions])

    flipped = [flip_horizontal(p) for p in positions]
    variants.append(flipped)
    for rotation in range(1, 4):
        variants.append([rotate_position(p, rotation) for p in flipped])

    return variants


def normalize_positions(positions: Sequence[Offset]) -> List[Offset]:
    """
    Normalize positions so that min x = 0 and min y = 0, sorted for canonical ordering.
    """
    if not positions:
        return []

    min_x = min(x for x, y in positions)
    min_y = min(y for x, y in positions)
    return sorted((x - min_x, y - min_y) for x, y in positions)


def unique_variants(shape: Union[ShapeTemplate, Sequence[Offset]]) -> List[Tuple[Offset, ...]]:
    """Distinct variants up to translation, in first-seen order."""
    seen = []
    for variant in expand(shape):
        key = tuple(normalize_positions(variant))
        if key not in seen:
            seen.append(key)
    return seen
