"""
Structural checks for engagement state machines.

Pure functions over plain lists and dicts; no models are touched. The
startup system check runs them against the built-in order and booking
machines, and tests call them directly.
"""

from collections import deque


def validate_definition_graph(
    states: list[str],
    transitions: dict[str, list[str]],
    initial_state: str,
    terminal_states: list[str]
) -> list[str]:
    """
    Return every structural problem found in a status graph (empty = usable).

    A usable graph has a known initial status, known terminal statuses,
    edges only between known statuses, no exits out of terminal statuses,
    at least one exit out of every other status, and every status reachable
    from the initial one.
    """
    known = set(states)
    terminal = set(terminal_states)
    errors = []

    if initial_state not in known:
        errors.append(f"initial_state '{initial_state}' not in states")

    errors.extend(
        f"terminal_state '{status}' not in states"
        for status in terminal_states if status not in known
    )

    for source, targets in transitions.items():
        if source not in known:
            errors.append(f"transition from unknown state '{source}'")
        if source in terminal and targets:
            errors.append(f"terminal state '{source}' has outgoing transitions")
        errors.extend(
            f"transition to unknown state '{target}'"
            for target in targets if target not in known
        )

    # Engagements parked in a status with no exit could never finish
    errors.extend(
        f"non-terminal state '{status}' has no outgoing transitions"
        for status in states
        if status not in terminal and not transitions.get(status)
    )

    if initial_state in known:
        reachable = reachable_from(initial_state, transitions)
        errors.extend(
            f"state '{status}' unreachable from initial_state"
            for status in states if status not in reachable
        )

    return errors


def reachable_from(start: str, transitions: dict[str, list[str]]) -> set[str]:
    """Statuses reachable from start by following edges, start included."""
    seen = {start}
    pending = deque([start])
    while pending:
        for target in transitions.get(pending.popleft(), ()):
            if target not in seen:
                seen.add(target)
                pending.append(target)
    return seen
