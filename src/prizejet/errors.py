"""Error types raised by PrizeJet services.

Services raise these; the API layer converts them into HTTP responses
with a single exception handler (see ``prizejet.api.main``).
"""


class PrizeJetError(Exception):
    """Base class for all PrizeJet errors."""

    status_code = 500
    kind = "error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__


class ValidationError(PrizeJetError):
    """Invalid or missing input."""

    status_code = 400
    kind = "validation_error"


class DuplicateEntryError(PrizeJetError):
    """This email has already been used to enter this campaign."""

    status_code = 409
    kind = "duplicate_entry"


class NotFoundError(PrizeJetError):
    """Not found."""

    status_code = 404
    kind = "not_found"


class AuthRequiredError(PrizeJetError):
    """Not authenticated."""

    status_code = 401
    kind = "auth_required"


class CampaignClosedError(PrizeJetError):
    """This campaign has ended."""

    status_code = 409
    kind = "campaign_closed"


class ProFeatureRequiredError(PrizeJetError):
    """Autoresponder and webhook integrations require a Pro subscription."""

    status_code = 403
    kind = "pro_required"


class UpstreamError(PrizeJetError):
    """The data store could not complete the request."""

    status_code = 503
    kind = "upstream_error"
