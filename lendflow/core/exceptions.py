"""Error taxonomy shared by the ledger services and the routers."""


class LendFlowError(Exception):
    """Base exception for all LendFlow errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        return self.message


class InvalidArgumentError(LendFlowError):
    """Malformed or out-of-range numeric input."""


class NotFoundError(LendFlowError):
    """A referenced customer or loan does not exist."""

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} not found", {"entity": entity, "id": entity_id})
        self.entity = entity
        self.entity_id = entity_id


class InvalidStateError(LendFlowError):
    """Operation attempted on a loan in a terminal state."""


class ConflictError(LendFlowError):
    """Concurrent update detected, or a uniqueness rule was violated."""


class StoreUnavailableError(LendFlowError):
    """The database cannot be reached; the process must not serve requests."""
