"""
Typed Exception Hierarchy for the Compliance Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the compliance gate (transfer pipelines, governance tooling, API
layers) must branch on the kind of failure, not on message wording:

    try:
        gate.add_rule(caller, rule)
    except RuleAlreadyExistsError as e:
        respond(409, code=e.code, rule_id=e.rule_id)
    except NotAuthorizedError as e:
        respond(403, code=e.code, role=e.required_role)

Every class carries a ``code`` class attribute (machine-readable, API-safe)
and keeps its context as attributes so it survives structured logging.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    ComplianceKernelError (base)
    |
    +-- AuthorizationError
    |   +-- NotAuthorizedError
    |
    +-- RuleError
    |   +-- RuleNotFoundError
    |   +-- RuleAlreadyExistsError
    |   +-- InvalidRuleError
    |
    +-- JurisdictionError
    |   +-- InvalidJurisdictionError
    |   +-- ReservedJurisdictionError
    |   +-- InvalidAccountError
    |
    +-- ApprovalError
    |   +-- InvalidApprovalKeyError
    |   +-- MalformedApprovalKeyError
    |   +-- ApprovalExpiredError
    |   +-- DuplicateApprovalKeyError
    |   +-- AuthorityMismatchError
    |
    +-- EngineStateError
        +-- EngineNotInitializedError
        +-- EngineAlreadyInitializedError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category      | Code                        | When Raised
--------------|-----------------------------|-------------------------------------
Authorization | NOT_AUTHORIZED              | Caller is not admin / governance
--------------|-----------------------------|-------------------------------------
Rule          | RULE_NOT_FOUND              | update/deactivate of unknown rule id
              | RULE_ALREADY_EXISTS         | add of an id that is already stored
              | INVALID_RULE                | Empty rule id or malformed fields
--------------|-----------------------------|-------------------------------------
Jurisdiction  | INVALID_JURISDICTION        | Empty jurisdiction label
              | RESERVED_JURISDICTION       | Label collides with the wildcard
--------------|-----------------------------|-------------------------------------
Approval      | INVALID_APPROVAL_KEY        | No pending approval under the key
              | MALFORMED_APPROVAL_KEY      | Key is not exactly 32 bytes
              | APPROVAL_EXPIRED            | Authorization after the window
              | DUPLICATE_APPROVAL_KEY      | Live record already under the key
              | AUTHORITY_MISMATCH          | Signer differs from bound authority
--------------|-----------------------------|-------------------------------------
Engine state  | ENGINE_NOT_INITIALIZED      | Principals not configured yet
              | ENGINE_ALREADY_INITIALIZED  | initialize() called twice

"Jurisdiction not set" and "no matching rule" are NOT exceptions: the
validation engine always returns a verdict and reports those outcomes in
``ValidationResult.error_code``.

===============================================================================
"""


class ComplianceKernelError(Exception):
    """
    Base exception for all compliance kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "COMPLIANCE_KERNEL_ERROR"


# Authorization exceptions


class AuthorizationError(ComplianceKernelError):
    """Base exception for caller authorization errors."""

    code: str = "AUTHORIZATION_ERROR"


class NotAuthorizedError(AuthorizationError):
    """Caller does not hold the role required by the operation."""

    code: str = "NOT_AUTHORIZED"

    def __init__(self, caller: str, required_role: str):
        self.caller = caller
        self.required_role = required_role
        super().__init__(
            f"Caller {caller} is not authorized: requires {required_role} role"
        )


# Rule exceptions


class RuleError(ComplianceKernelError):
    """Base exception for rule store errors."""

    code: str = "RULE_ERROR"


class RuleNotFoundError(RuleError):
    """Rule with given ID is not stored."""

    code: str = "RULE_NOT_FOUND"

    def __init__(self, rule_id: str):
        self.rule_id = rule_id
        super().__init__(f"Rule not found: {rule_id}")


class RuleAlreadyExistsError(RuleError):
    """Rule with given ID is already stored."""

    code: str = "RULE_ALREADY_EXISTS"

    def __init__(self, rule_id: str):
        self.rule_id = rule_id
        super().__init__(f"Rule already exists: {rule_id}")


class InvalidRuleError(RuleError):
    """Rule definition is structurally invalid."""

    code: str = "INVALID_RULE"

    def __init__(self, rule_id: str, reason: str):
        self.rule_id = rule_id
        self.reason = reason
        super().__init__(f"Invalid rule {rule_id!r}: {reason}")


# Jurisdiction exceptions


class JurisdictionError(ComplianceKernelError):
    """Base exception for jurisdiction label errors."""

    code: str = "JURISDICTION_ERROR"


class InvalidJurisdictionError(JurisdictionError):
    """Jurisdiction label is empty or not a string."""

    code: str = "INVALID_JURISDICTION"

    def __init__(self, label: object, reason: str):
        self.label = label
        self.reason = reason
        super().__init__(f"Invalid jurisdiction {label!r}: {reason}")


class ReservedJurisdictionError(JurisdictionError):
    """
    Label collides with the wildcard token.

    A real jurisdiction can never be named like the wildcard, otherwise a
    rule written for that jurisdiction would silently match everything.
    """

    code: str = "RESERVED_JURISDICTION"

    def __init__(self, label: str):
        self.label = label
        super().__init__(f"Jurisdiction label {label!r} is reserved for wildcard rules")


class InvalidAccountError(JurisdictionError):
    """Account identifier is empty or longer than the directory allows."""

    code: str = "INVALID_ACCOUNT"

    def __init__(self, account: object, reason: str):
        self.account = account
        self.reason = reason
        super().__init__(f"Invalid account {account!r}: {reason}")


# Approval exceptions


class ApprovalError(ComplianceKernelError):
    """Base exception for approval ledger errors."""

    code: str = "APPROVAL_ERROR"


class InvalidApprovalKeyError(ApprovalError):
    """No pending approval is recorded under the key."""

    code: str = "INVALID_APPROVAL_KEY"

    def __init__(self, approval_key: str):
        self.approval_key = approval_key
        super().__init__(f"No pending approval for key {approval_key}")


class MalformedApprovalKeyError(ApprovalError):
    """Approval key is not a 32-byte value."""

    code: str = "MALFORMED_APPROVAL_KEY"

    def __init__(self, length: int | None, reason: str = "expected 32 bytes"):
        self.length = length
        self.reason = reason
        super().__init__(f"Malformed approval key (length={length}): {reason}")


class ApprovalExpiredError(ApprovalError):
    """Authorization attempted after the approval window closed."""

    code: str = "APPROVAL_EXPIRED"

    def __init__(self, approval_key: str, created_at: int, expires_at: int, now: int):
        self.approval_key = approval_key
        self.created_at = created_at
        self.expires_at = expires_at
        self.now = now
        super().__init__(
            f"Approval {approval_key} expired at {expires_at} (now {now})"
        )


class DuplicateApprovalKeyError(ApprovalError):
    """A live (non-expired) approval is already recorded under the key."""

    code: str = "DUPLICATE_APPROVAL_KEY"

    def __init__(self, approval_key: str):
        self.approval_key = approval_key
        super().__init__(f"Approval key already in use: {approval_key}")


class AuthorityMismatchError(ApprovalError):
    """Signer is not the authority bound to the pending approval."""

    code: str = "AUTHORITY_MISMATCH"

    def __init__(self, approval_key: str, expected: str, actual: str):
        self.approval_key = approval_key
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Approval {approval_key} must be signed by {expected}, not {actual}"
        )


# Engine state exceptions


class EngineStateError(ComplianceKernelError):
    """Base exception for engine lifecycle errors."""

    code: str = "ENGINE_STATE_ERROR"


class EngineNotInitializedError(EngineStateError):
    """Principals have not been configured."""

    code: str = "ENGINE_NOT_INITIALIZED"

    def __init__(self):
        super().__init__("Compliance engine not initialized. Call initialize() first.")


class EngineAlreadyInitializedError(EngineStateError):
    """initialize() was already called for this store."""

    code: str = "ENGINE_ALREADY_INITIALIZED"

    def __init__(self, admin: str):
        self.admin = admin
        super().__init__(f"Compliance engine already initialized (admin={admin})")
