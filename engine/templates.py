"""
Shape template catalog and the per-round random selection policy.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

Offset = Tuple[int, int]  # (x, y) relative to the template origin


@dataclass(frozen=True)
class ShapeTemplate:
    """Represents a scoring shape."""
    id: str
    name: str
    positions: Tuple[Offset, ...]
    points: int

    def __post_init__(self):
        """Validate template after initialization."""
        if len(set(self.positions)) != len(self.positions):
            raise ValueError(f"Template {self.id} has duplicate positions")

    @property
    def size(self) -> int:
        """Number of cells in the shape."""
        return len(self.positions)


# Points by template size
POINTS_BY_SIZE = {3: 1, 4: 3, 5: 5, 6: 10}


def _template(template_id: str, name: str, positions: List[Offset]) -> ShapeTemplate:
    return ShapeTemplate(template_id, name, tuple(positions), POINTS_BY_SIZE[len(positions)])


TEMPLATES: Tuple[ShapeTemplate, ...] = (
    # 3 cells (1pt)
    _template('3-line', "Line 3", [(0, 0), (1, 0), (2, 0)]),
    _template('3-l', "L", [(0, 0), (1, 0), (0, 1)]),
    _template('3-v', "V", [(0, 0), (1, 1), (-1, 1)]),
    _template('3-corner', "Corner", [(0, 0), (1, 0), (1, 1)]),
    _template('3-diagonal', "Diagonal 3", [(0, 0), (1, 1), (2, 2)]),

    # 4 cells (3pt)
    _template('4-line', "Line 4", [(0, 0), (1, 0), (2, 0), (3, 0)]),
    _template('4-square', "Square", [(0, 0), (1, 0), (0, 1), (1, 1)]),
    _template('4-t', "T", [(0, 0), (-1, 0), (1, 0), (0, 1)]),
    _template('4-s', "S", [(0, 0), (1, 0), (1, 1), (2, 1)]),
    _template('4-z', "Z", [(0, 0), (1, 0), (1, 1), (0, 1)]),
    _template('4-l-big', "Big L", [(0, 0), (0, 1), (0, 2), (1, 0)]),

    # 5 cells (5pt)
    _template('5-line', "Line 5", [(0, 0), (1, 0), (2, 0), (3, 0), (4, 0)]),
    _template('5-cross', "Cross", [(0, 0), (1, 0), (-1, 0), (0, 1), (0, -1)]),
    _template('5-u', "U", [(0, 0), (0, 1), (1, 1), (2, 1), (2, 0)]),
    _template('5-t-big', "Big T", [(0, 0), (1, 0), (2, 0), (1, 1), (1, 2)]),

    # 6 cells (10pt)
    _template('6-line', "Line 6", [(0, 0), (1, 0), (2, 0), (3, 0), (4, 0), (5, 0)]),
    _template('6-stairs', "Stairs", [(0, 0), (1, 0), (1, 1), (2, 1), (2, 2), (3, 2)]),
    _template('6-rect', "Rectangle", [(0, 0), (1, 0), (2, 0), (0, 1), (1, 1), (2, 1)]),
)


def get_template_by_id(template_id: str) -> Optional[ShapeTemplate]:
    """Get a template by its ID."""
    for template in TEMPLATES:
        if template.id == template_id:
            return template
    return None


def select_random_templates(
    count: int = 6,
    rng: Optional[np.random.RandomState] = None,
    small_quota: int = 4,
    small_max_size: int = 4,
    catalog: Tuple[ShapeTemplate, ...] = TEMPLATES,
) -> List[ShapeTemplate]:
    """
    Draw the active templates for a round, without replacement.

    Up to ``small_quota`` templates are drawn from the pool of templates with
    at most ``small_max_size`` cells first, then the selection is filled up to
    ``count`` from whatever remains of both pools.

    Args:
        count: Number of templates to select
        rng: Random source; a fresh unseeded RandomState when None
        small_quota: How many templates to take from the small pool first
        small_max_size: Largest size that counts as "small"
        catalog: Templates to draw from

    Returns:
        Selected templates in draw order
    """
    if rng is None:
        rng = np.random.RandomState()

    small = [t for t in catalog if t.size <= small_max_size]
    large = [t for t in catalog if t.size > small_max_size]
    selected: List[ShapeTemplate] = []

    while len(selected) < min(small_quota, count) and small:
        selected.append(small.pop(rng.randint(0, len(small))))

    remaining = small + large
    while len(selected) < count and remaining:
        selected.append(remaining.pop(rng.randint(0, len(remaining))))

    return selected
