class ShareError(Exception):
    """Base class for failures of the share/referral flow."""


class ConfigurationError(ShareError):
    pass


class ShareNotAuthorized(ShareError):
    """Caller does not own the record being shared."""


class ShareNotFound(ShareError):
    """Public code unknown, link inactive, or shared record missing."""


class ShareExpired(ShareNotFound):
    """Public code known but past its expiry.

    Subclasses ShareNotFound so callers that only care about visibility can
    treat both the same way.
    """


class BadShareToken(ShareError):
    """Referral token is malformed or was not produced by our cipher."""


class SharePersistenceError(ShareError):
    pass
