"""Application state machine: pure logic, no DB dependency.

An application starts ``pending`` and the owning business moves it once,
to ``accepted`` or ``rejected``. Both are terminal.
"""

from enum import StrEnum


class ApplicationStatus(StrEnum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class ApplicationAction(StrEnum):
    ACCEPT = "accept"
    REJECT = "reject"


class Actor(StrEnum):
    BUSINESS = "business"
    ADVERTISER = "advertiser"


class InvalidTransitionError(Exception):
    """Raised when an application transition is not allowed."""

    def __init__(self, current: str, action: str, actor: str | None = None):
        self.current = current
        self.action = action
        self.actor = actor
        msg = f"Invalid transition: {current} + {action}"
        if actor:
            msg += f" by {actor}"
        super().__init__(msg)


# (current_status, action) → (new_status, allowed actors)
TRANSITIONS: dict[
    tuple[ApplicationStatus, ApplicationAction], tuple[ApplicationStatus, frozenset[Actor]]
] = {
    (ApplicationStatus.PENDING, ApplicationAction.ACCEPT): (
        ApplicationStatus.ACCEPTED,
        frozenset({Actor.BUSINESS}),
    ),
    (ApplicationStatus.PENDING, ApplicationAction.REJECT): (
        ApplicationStatus.REJECTED,
        frozenset({Actor.BUSINESS}),
    ),
}

INITIAL_STATUS = ApplicationStatus.PENDING

TERMINAL_STATUSES: frozenset[ApplicationStatus] = frozenset({
    ApplicationStatus.ACCEPTED,
    ApplicationStatus.REJECTED,
})


def validate_transition(current: str, action: str, actor: str) -> ApplicationStatus:
    """Validate and return the new status for a transition.

    Raises InvalidTransitionError if the transition is not allowed.
    """
    try:
        current_status = ApplicationStatus(current)
        app_action = ApplicationAction(action)
        actor_enum = Actor(actor)
    except ValueError:
        raise InvalidTransitionError(current, action, actor)

    key = (current_status, app_action)
    if key not in TRANSITIONS:
        raise InvalidTransitionError(current, action, actor)

    new_status, allowed_actors = TRANSITIONS[key]
    if actor_enum not in allowed_actors:
        raise InvalidTransitionError(current, action, actor)

    return new_status


def get_available_actions(current: str, actor: str) -> list[str]:
    """Return the action names the actor may take from ``current``."""
    try:
        current_status = ApplicationStatus(current)
        actor_enum = Actor(actor)
    except ValueError:
        return []

    if current_status in TERMINAL_STATUSES:
        return []

    return [
        action.value
        for (status, action), (_, allowed_actors) in TRANSITIONS.items()
        if status == current_status and actor_enum in allowed_actors
    ]
