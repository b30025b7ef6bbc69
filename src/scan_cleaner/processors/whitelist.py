"""Manual whitelist masks: merging, painting and undo history."""

from typing import List, Optional, Tuple

import numpy as np

from ..exceptions import DimensionMismatchError


def apply_manual_whitelist(
    removal_mask: np.ndarray,
    manual_mask: Optional[np.ndarray],
) -> Tuple[np.ndarray, int]:
    """Clear every manually whitelisted pixel from ``removal_mask``.

    ``manual_mask`` must already have the removal mask's shape (see
    :func:`validate_mask`).

    Returns:
        Tuple of (merged mask, number of pixels the whitelist rescued)
    """
    if manual_mask is None:
        return removal_mask.copy(), 0

    rescued = removal_mask & manual_mask
    return removal_mask & ~manual_mask, int(np.count_nonzero(rescued))


def paint_whitelist(
    mask: np.ndarray,
    x: int,
    y: int,
    radius: int,
    value: bool = True,
) -> np.ndarray:
    """Return a copy of ``mask`` with a round brush stamp at (x, y).

    Covers pixels with dx² + dy² <= radius², clipped to the mask. Use
    ``value=False`` to erase.
    """
    painted = mask.astype(bool, copy=True)
    height, width = painted.shape
    y0, y1 = max(0, y - radius), min(height, y + radius + 1)
    x0, x1 = max(0, x - radius), min(width, x + radius + 1)
    if y0 >= y1 or x0 >= x1:
        return painted

    dy, dx = np.ogrid[y0 - y:y1 - y, x0 - x:x1 - x]
    brush = dx * dx + dy * dy <= radius * radius
    painted[y0:y1, x0:x1][brush] = value
    return painted


class WhitelistHistory:
    """Undo/redo list of manual whitelist snapshots.

    Snapshots are stored read-only. Pushing after an undo discards the
    redo tail.
    """

    def __init__(self, shape: Tuple[int, int]):
        self.shape = tuple(shape)
        self._snapshots: List[np.ndarray] = []
        self._cursor = -1
        self.clear()

    def _freeze(self, mask: np.ndarray) -> np.ndarray:
        frozen = np.array(mask, dtype=bool, copy=True)
        if frozen.shape != self.shape:
            raise DimensionMismatchError(
                "Whitelist snapshot does not match the image",
                expected=self.shape,
                actual=frozen.shape,
            )
        frozen.flags.writeable = False
        return frozen

    @property
    def current(self) -> np.ndarray:
        """The active snapshot."""
        return self._snapshots[self._cursor]

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._snapshots) - 1

    def push(self, mask: np.ndarray) -> np.ndarray:
        """Record ``mask`` as the new current snapshot."""
        del self._snapshots[self._cursor + 1:]
        self._snapshots.append(self._freeze(mask))
        self._cursor = len(self._snapshots) - 1
        return self.current

    def undo(self) -> np.ndarray:
        if self.can_undo:
            self._cursor -= 1
        return self.current

    def redo(self) -> np.ndarray:
        if self.can_redo:
            self._cursor += 1
        return self.current

    def clear(self) -> None:
        """Forget all history and start from an empty mask (new image)."""
        self._snapshots = [self._freeze(np.zeros(self.shape, dtype=bool))]
        self._cursor = 0

    def __len__(self) -> int:
        return len(self._snapshots)
