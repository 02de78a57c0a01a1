"""
Domain-specific errors for the accounts bounded context.

All errors raised from the domain and application layers are defined here.
These are mapped to HTTP responses at the interface layer.
No framework imports allowed.
"""


class AccountDomainError(Exception):
    """Base error for all accounts domain errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class AccountValidationError(AccountDomainError):
    """Raised when a request breaks a registration or profile rule."""


class InsufficientContactsError(AccountValidationError):
    """Raised when fewer than the minimum number of contacts is supplied."""

    def __init__(self, count: int, minimum: int) -> None:
        super().__init__(f"Minimum {minimum} contacts required for registration")
        self.count = count
        self.minimum = minimum


class MissingContactNumberError(AccountValidationError):
    """Raised when a contact has no contact number."""

    def __init__(self, position: int) -> None:
        super().__init__(f"Contact number is required for contact #{position}")
        self.position = position


class InvalidContactRolesError(AccountValidationError):
    """Raised when contact roles repeat or the Kin role is missing."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class InvalidDateError(AccountValidationError):
    """Raised when a date field is not in a recognised format."""

    def __init__(self, field_name: str, value: object) -> None:
        super().__init__(
            f"Invalid date for {field_name}: expected YYYY-MM-DD"
        )
        self.field_name = field_name
        self.value = value


class DuplicateAccountError(AccountDomainError):
    """Base error for uniqueness conflicts on the personal record."""


class DuplicateEmailError(DuplicateAccountError):
    """Raised when the email is already registered to another account."""

    def __init__(self, email: str) -> None:
        super().__init__("Email already registered")
        self.email = email


class DuplicatePhoneError(DuplicateAccountError):
    """Raised when the cell number is already registered to another account."""

    def __init__(self, cell_number: str) -> None:
        super().__init__("Phone number already registered")
        self.cell_number = cell_number


class AccountNotFoundError(AccountDomainError):
    """Raised when an account cannot be found."""

    def __init__(self, acc_id: str) -> None:
        super().__init__(f"Account not found: {acc_id}")
        self.acc_id = acc_id


class AuthenticationError(AccountDomainError):
    """Base error for failed authentication."""


class InvalidCredentialsError(AuthenticationError):
    """Raised on a failed login. Never says which credential was wrong."""

    def __init__(self) -> None:
        super().__init__("Invalid email or password")


class InvalidTokenError(AuthenticationError):
    """Raised when a bearer token is missing, malformed, or expired."""

    def __init__(self, reason: str = "Invalid or expired token") -> None:
        super().__init__(reason)


class AccountAccessDeniedError(AccountDomainError):
    """Raised when a valid token is used against another account."""

    def __init__(self, acc_id: str) -> None:
        super().__init__(f"Access denied for account: {acc_id}")
        self.acc_id = acc_id


class IdentifierExhaustedError(AccountDomainError):
    """Raised when no free identifier could be generated."""

    def __init__(self, prefix: str, attempts: int) -> None:
        super().__init__(
            f"Failed to generate a unique {prefix} identifier after {attempts} attempts"
        )
        self.prefix = prefix
        self.attempts = attempts


class RegistrationIntegrityError(AccountDomainError):
    """Raised when a row written during registration cannot be read back."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Registration integrity check failed: {reason}")
        self.reason = reason


class PersistenceError(AccountDomainError):
    """Raised when the database is unreachable or a statement fails."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Persistence failure: {reason}")
        self.reason = reason
