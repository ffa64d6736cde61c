"""
Selection Controller.

Tracks the selected node ids and the anchor used for shift-range selection.
There is no persistent mode: each click is interpreted from its modifier and
the current state alone.
"""

import logging
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from .types import ClickModifier, DeleteRequest, Position

logger = logging.getLogger(__name__)


class SelectionController:
    """
    Click, range, toggle and group-drag semantics over node ids.

    Selection order is kept (insertion-ordered dict) so broadcasts are stable.
    """

    def __init__(self):
        self._selected: Dict[str, None] = {}
        self._anchor: Optional[str] = None

    @property
    def selected(self) -> List[str]:
        return list(self._selected)

    @property
    def anchor(self) -> Optional[str]:
        return self._anchor

    def is_selected(self, node_id: str) -> bool:
        return node_id in self._selected

    def __len__(self) -> int:
        return len(self._selected)

    def _replace(self, node_ids: Iterable[str]) -> None:
        self._selected = dict.fromkeys(node_ids)

    # =========================================================================
    # Click handling
    # =========================================================================

    def click(
        self,
        node_id: str,
        node_order: Sequence[str],
        modifier: ClickModifier = ClickModifier.NONE,
    ) -> List[str]:
        """
        Apply a click on node_id and return the new selection.

        node_order is the current node list order, used for shift ranges.
        """
        if modifier == ClickModifier.SHIFT and self._can_extend_to(node_id, node_order):
            start = node_order.index(self._anchor)
            end = node_order.index(node_id)
            lo, hi = min(start, end), max(start, end)
            self._replace(node_order[lo:hi + 1])
        elif modifier == ClickModifier.TOGGLE:
            if node_id in self._selected:
                del self._selected[node_id]
            else:
                self._selected[node_id] = None
            self._anchor = node_id
        else:
            self._replace([node_id])
            self._anchor = node_id
        return self.selected

    def _can_extend_to(self, node_id: str, node_order: Sequence[str]) -> bool:
        return (
            self._anchor is not None
            and self._anchor != node_id
            and self._anchor in node_order
            and node_id in node_order
        )

    def select_only(self, node_id: str) -> List[str]:
        self._replace([node_id])
        self._anchor = node_id
        return self.selected

    def clear(self) -> bool:
        """Drop selection and anchor. Returns True if anything was selected."""
        changed = bool(self._selected) or self._anchor is not None
        self._selected = {}
        self._anchor = None
        return changed

    def background_click(self, test_mode: bool = False) -> bool:
        if test_mode:
            return False
        return self.clear()

    def prune(self, existing_ids: Iterable[str]) -> bool:
        """Forget ids no longer present in the graph. Returns True if it changed."""
        existing = set(existing_ids)
        stale = [nid for nid in self._selected if nid not in existing]
        for node_id in stale:
            del self._selected[node_id]
        if self._anchor is not None and self._anchor not in existing:
            self._anchor = None
        if stale:
            logger.debug(f"Pruned {len(stale)} stale selection id(s)")
        return bool(stale)

    # =========================================================================
    # Group drag
    # =========================================================================

    def group_drag(
        self,
        node_id: str,
        new_position: Position,
        positions: Mapping[str, Position],
    ) -> Dict[str, Position]:
        """
        Compute the positions produced by dragging node_id to new_position.

        When the dragged node belongs to a multi-node selection every selected
        node receives the same delta; otherwise only the dragged node moves.
        """
        old = positions.get(node_id)
        if old is None:
            return {}

        updates = {node_id: new_position}
        if node_id not in self._selected or len(self._selected) < 2:
            return updates

        dx = new_position.x - old.x
        dy = new_position.y - old.y
        for other in self._selected:
            if other == node_id or other not in positions:
                continue
            updates[other] = positions[other].offset(dx, dy)
        return updates

    # =========================================================================
    # Delete key
    # =========================================================================

    def delete_request(
        self,
        legacy_id_of: Callable[[str], Optional[str]],
        name_of: Callable[[str], str],
        test_mode: bool = False,
    ) -> Optional[DeleteRequest]:
        """
        Build the confirmation prompt for deleting the current selection.

        Nothing is mutated; the caller shows the prompt and confirms.
        """
        if test_mode or not self._selected:
            return None

        node_ids = [nid for nid in self._selected if legacy_id_of(nid) is not None]
        if not node_ids:
            return None

        if len(node_ids) == 1:
            label = name_of(node_ids[0]) or "Component"
        else:
            label = f"{len(node_ids)} components"

        return DeleteRequest(
            node_ids=node_ids,
            legacy_ids=[legacy_id_of(nid) for nid in node_ids],
            label=label,
        )
