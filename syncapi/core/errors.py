"""Errors raised by the internal configuration handlers."""


class ConfigNotFoundError(Exception):
    def __init__(self, config_type: str, config_id: str):
        self.config_type = config_type
        self.config_id = config_id
        super().__init__(f"{config_type} not found: {config_id}")


class JsonValidationError(Exception):
    """The request is well-formed but its content is invalid."""


class ValueConflictError(Exception):
    """The request conflicts with the current state of the resource."""
