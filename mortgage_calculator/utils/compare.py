"""Side-by-side comparison of saved properties."""

from typing import Iterable, List, Optional

from mortgage_calculator.config import MAX_PROPERTIES
from mortgage_calculator.utils.properties import SavedProperty


def select_for_comparison(selected_ids: Iterable[str], limit: int = MAX_PROPERTIES) -> List[str]:
    """
    Apply the selection rules of the compare tab.

    Duplicate ids are dropped and, once the limit is reached, further ids
    are ignored in the order given.
    """
    selection = []
    for property_id in selected_ids:
        if property_id in selection:
            continue
        if len(selection) >= limit:
            break
        selection.append(property_id)
    return selection


def compare_properties(properties: List[SavedProperty], selected_ids: Iterable[str],
                       limit: int = MAX_PROPERTIES) -> dict:
    """
    Build comparison data for the selected properties.

    Ids that are no longer saved are dropped before the limit applies.

    Args:
        properties: All saved properties, in storage order
        selected_ids: Ids picked by the user
        limit: Maximum number of properties compared at once

    Returns:
        Dictionary with the selected ids, the selected properties in storage
        order, and a payment summary (None unless at least two are selected)
    """
    known_ids = {p.id for p in properties}
    selection = select_for_comparison([i for i in selected_ids if i in known_ids], limit)
    selected = [p for p in properties if p.id in selection]

    summary: Optional[dict] = None
    if len(selected) > 1:
        payments = [p.monthly_payment for p in selected]
        summary = {
            "lowest_payment": min(payments),
            "highest_payment": max(payments),
            "payment_difference": max(payments) - min(payments),
        }

    return {
        "selected_ids": [p.id for p in selected],
        "properties": selected,
        "summary": summary,
    }
