"""
Typed exception hierarchy for the ledger kernel.

Every error raised by the kernel is an instance of a typed class carrying a
machine-readable ``code`` class attribute plus the structured data needed to
act on it. Callers catch by type and report by code; they never parse
messages.

    LedgerKernelError (base)
    |
    +-- UnrecognizedTypeError
    +-- InvalidInputError
    |
    +-- AccountError
    |   +-- MissingAccountError
    |
    +-- CurrencyError
    |   +-- CurrencyReconciliationError
    |   +-- InvalidCurrencyError
    |
    +-- LabelError
    |   +-- BudgetNotFoundError
    |
    +-- BudgetLimitError
    |   +-- BudgetLimitNotFoundError
    |   +-- InvalidBudgetLimitError
    |
    +-- PersistenceError
    |
    +-- HelpFetchError

Propagation:
    Everything except HelpFetchError aborts the journal's atomic unit and is
    re-raised to the caller after rollback. HelpFetchError never leaves
    HelpService; it drives the language/placeholder fallback chain.
"""


class LedgerKernelError(Exception):
    """
    Base exception for all ledger kernel errors.

    All subclasses must define a ``code`` class attribute.
    """

    code: str = "LEDGER_KERNEL_ERROR"


class UnrecognizedTypeError(LedgerKernelError):
    """Transaction type is outside the set the operation can handle."""

    code: str = "UNRECOGNIZED_TRANSACTION_TYPE"

    def __init__(self, transaction_type: str, operation: str = "journal"):
        self.transaction_type = transaction_type
        self.operation = operation
        super().__init__(
            f"Did not recognise transaction type '{transaction_type}' "
            f"for {operation}"
        )


class InvalidInputError(LedgerKernelError):
    """A non-amount request field could not be parsed."""

    code: str = "INVALID_INPUT"

    def __init__(self, field_name: str, reason: str):
        self.field_name = field_name
        self.reason = reason
        super().__init__(f"Invalid value for {field_name!r}: {reason}")


# Account-related exceptions


class AccountError(LedgerKernelError):
    """Base exception for account-related errors."""

    code: str = "ACCOUNT_ERROR"


class MissingAccountError(AccountError):
    """
    A required account could not be resolved.

    Raised when the account does not exist, belongs to another user, or the
    auto-creation policy produced nothing.
    """

    code: str = "MISSING_ACCOUNT"

    def __init__(self, side: str, account_id: int | None = None, user_id: int | None = None):
        self.side = side
        self.account_id = account_id
        self.user_id = user_id
        detail = f" (account #{account_id})" if account_id is not None else ""
        super().__init__(f'"{side}"-account is missing{detail}, so we cannot continue')


# Currency-related exceptions


class CurrencyError(LedgerKernelError):
    """Base exception for currency-related errors."""

    code: str = "CURRENCY_ERROR"


class CurrencyReconciliationError(CurrencyError):
    """An amount field needed for reconciliation is missing or malformed."""

    code: str = "CURRENCY_RECONCILIATION_FAILED"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Cannot reconcile '{field}': {reason}")


class InvalidCurrencyError(CurrencyError):
    """Currency code is not a valid ISO 4217 code."""

    code: str = "INVALID_CURRENCY"

    def __init__(self, currency_code: str):
        self.currency_code = currency_code
        super().__init__(f"Invalid ISO 4217 currency code: {currency_code!r}")


# Label-related exceptions


class LabelError(LedgerKernelError):
    """Base exception for tag/category/budget errors."""

    code: str = "LABEL_ERROR"


class BudgetNotFoundError(LabelError):
    """Budget does not exist for this user."""

    code: str = "BUDGET_NOT_FOUND"

    def __init__(self, budget_id: int, user_id: int):
        self.budget_id = budget_id
        self.user_id = user_id
        super().__init__(f"Budget not found: {budget_id}")


# Budget limit exceptions


class BudgetLimitError(LedgerKernelError):
    """Base exception for budget limit errors."""

    code: str = "BUDGET_LIMIT_ERROR"


class BudgetLimitNotFoundError(BudgetLimitError):
    """
    Budget limit does not exist for this user.

    Raised identically for missing rows and rows owned by another user, so
    the existence of other users' limits is never revealed.
    """

    code: str = "BUDGET_LIMIT_NOT_FOUND"

    def __init__(self, limit_id: int):
        self.limit_id = limit_id
        super().__init__(f"Budget limit not found: {limit_id}")


class InvalidBudgetLimitError(BudgetLimitError):
    """Budget limit range or amount is invalid."""

    code: str = "INVALID_BUDGET_LIMIT"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid budget limit: {reason}")


# Storage


class PersistenceError(LedgerKernelError):
    """A storage write failed; the whole unit was rolled back."""

    code: str = "PERSISTENCE_FAILED"

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        self.detail = detail
        super().__init__(f"Persistence failure during {operation}: {detail}")


# Help delivery


class HelpFetchError(LedgerKernelError):
    """Remote help content could not be fetched."""

    code: str = "HELP_FETCH_FAILED"

    def __init__(self, route: str, language: str, reason: str):
        self.route = route
        self.language = language
        self.reason = reason
        super().__init__(
            f"Could not fetch help for route '{route}' ({language}): {reason}"
        )
