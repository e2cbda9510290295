"""User-scoped backend actions — every read/write is filtered by the caller's user id."""


class ActionError(Exception):
    """Domain failure (validation, conflict) reported back to the caller."""


class NotFoundError(ActionError):
    """The record does not exist or belongs to another user."""
