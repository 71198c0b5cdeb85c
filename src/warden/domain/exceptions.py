"""Authorization engine exceptions.

None of these are user-correctable. Endpoint handlers turn all of them into
a generic "forbidden" response; the details belong in operator-facing logs.
Ordinary denial is never an exception: it is ``Decision.allowed == False``.
"""


class AuthorizationError(Exception):
    """Base class for authorization engine errors."""

    pass


class InvalidPermissionFormat(AuthorizationError, ValueError):
    """A permission string is malformed (no colon and not the literal '*')."""

    def __init__(self, value: object, message: str | None = None) -> None:
        self.value = value
        super().__init__(message or f"Invalid permission string: {value!r}")


class UnresolvableRuleValue(AuthorizationError):
    """A data scope rule references a value the evaluation context cannot supply."""

    def __init__(self, rule_id: str | None, value_type: str, message: str) -> None:
        self.rule_id = rule_id
        self.value_type = value_type
        super().__init__(message)


class MissingRoleContext(AuthorizationError):
    """The principal resolves to no roles."""

    def __init__(self, user_id: str | None) -> None:
        self.user_id = user_id
        super().__init__(f"No roles could be resolved for user {user_id!r}")


class PolicyManagementError(AuthorizationError):
    """An administrative write to roles or rules was refused."""

    pass


class InvalidRuleDefinition(PolicyManagementError, ValueError):
    """A data permission rule definition is malformed."""

    pass
