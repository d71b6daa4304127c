"""Error kinds raised by the broker core.

Every stage raises the first error it hits and callers re-raise it
unchanged; the only rewrite happens in the catalog synchronizer, which
turns bucket access failures into ``BUCKET_ACCESS_MESSAGE``.
"""

BUCKET_ACCESS_MESSAGE = (
    "Cannot access S3 Bucket, either it does not exist or the IAM user/role "
    "the broker is configured to use has no access to the bucket"
)


class BrokerError(RuntimeError):
    """Base class for broker errors."""


class IdentityError(BrokerError):
    """Raised when the caller's AWS account cannot be resolved."""


class BucketAccessError(BrokerError):
    """Raised when the template bucket is missing or not readable."""


class NotFoundError(BrokerError):
    """Raised when an expected cache entry, object or record is absent."""


class ParseError(BrokerError):
    """Raised when a template document cannot be parsed."""


class ValidationError(BrokerError, ValueError):
    """Raised for malformed options or request parameters."""


class ConflictError(BrokerError):
    """Raised when a request clashes with existing broker state."""
