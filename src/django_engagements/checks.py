"""System checks for django-engagements."""

from django.core import checks

from .graph import validate_definition_graph
from .transitions import MACHINES, REQUIRED_ROLE


@checks.register()
def check_state_machines(app_configs, **kwargs):
    """Report transition tables that are not usable state machines."""
    errors = []
    for kind, machine in MACHINES.items():
        graph_errors = validate_definition_graph(
            states=list(machine.states),
            transitions=machine.transitions,
            initial_state=machine.initial,
            terminal_states=list(machine.terminal),
        )
        for message in graph_errors:
            errors.append(
                checks.Error(
                    f"{kind} state machine: {message}",
                    id="django_engagements.E001",
                )
            )

        for targets in machine.transitions.values():
            for target in targets:
                if target not in REQUIRED_ROLE:
                    errors.append(
                        checks.Error(
                            f"{kind} state machine: no required role for '{target}'",
                            id="django_engagements.E002",
                        )
                    )
    return errors
