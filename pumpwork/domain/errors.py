from dataclasses import dataclass


@dataclass(frozen=True)
class OperationError:
    """Expected failure of a component operation."""

    code: str
    message: str
    field: str | None = None


NOT_FOUND = "not_found"
DUPLICATE = "duplicate"
INVALID = "invalid"
FORBIDDEN = "forbidden"


def not_found(entity: str, entity_id: object) -> OperationError:
    return OperationError(code=NOT_FOUND, message=f"{entity} {entity_id} not found")


def invalid(message: str, field: str | None = None) -> OperationError:
    return OperationError(code=INVALID, message=message, field=field)


def duplicate(message: str) -> OperationError:
    return OperationError(code=DUPLICATE, message=message)


def forbidden(message: str = "Access denied") -> OperationError:
    return OperationError(code=FORBIDDEN, message=message)


class WalletError(Exception):
    """Error raised by a wallet provider; ``code`` follows the provider's codes."""

    def __init__(self, message: str, code: int | None = None):
        super().__init__(message)
        self.code = code
