"""Transition checks for the status enumerations used across the core."""
from shared.exceptions import InvalidTransition


def ensure_transition(transitions, current, target, reference=None):
    """
    Raise ``InvalidTransition`` unless ``current -> target`` is listed in
    ``transitions``. The table must have an entry for every state, terminal
    states mapping to an empty set.
    """
    if current not in transitions:
        raise InvalidTransition(f"Unknown state {current!r}.", reference=reference)
    if target not in transitions[current]:
        raise InvalidTransition(
            f"Cannot move from {current} to {target}.",
            reference=reference,
        )
    return target
