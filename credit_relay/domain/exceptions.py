"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationError(DomainException):
    """Request is missing a required field or carries a malformed value"""

    pass


class InvalidAmount(ValidationError):
    """Amount cannot be represented in chain units (negative or not finite)"""

    pass


class ConfigurationError(DomainException):
    """A deployment setting needed by the requested operation is absent"""

    pass


class Unauthorized(DomainException):
    """Signing identity lacks the on-chain role the operation requires"""

    pass


class ChainCallError(DomainException):
    """RPC endpoint rejected the call or could not be reached"""

    pass


class TransactionReverted(ChainCallError):
    """Transaction was mined with a failed status"""

    def __init__(self, tx_hash: str):
        super().__init__(f"Transaction {tx_hash} reverted")
        self.tx_hash = tx_hash


class ChainTimeout(DomainException):
    """Write call was not confirmed within the configured bound"""

    def __init__(self, tx_hash: str, timeout: float):
        super().__init__(f"Transaction {tx_hash} not confirmed after {timeout}s")
        self.tx_hash = tx_hash
        self.timeout = timeout


class StoreUnavailable(DomainException):
    """Metadata store is unreachable or refused the credentials"""

    pass


class NotFound(DomainException):
    """Metadata reference does not resolve to any stored content"""

    pass
