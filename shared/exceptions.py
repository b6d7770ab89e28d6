"""
Error taxonomy for the meal subscription core.

Every component raises the most specific subclass it can. The boundary
(``api.views.custom_exception_handler``) maps the kind to an HTTP status and
returns ``code`` and ``message`` unchanged, so callers can branch on the code.
"""


class ServiceError(Exception):
    """Base class for all failures raised by the core."""

    status_code = 500
    default_code = 'INTERNAL_ERROR'
    default_message = 'An internal error occurred.'

    def __init__(self, message=None, *, code=None, reference=None, subscriber_id=None):
        self.message = message or self.default_message
        self.code = code or self.default_code
        # The offending reference (e.g. "scheduled_meal:42"), used for diagnosis
        self.reference = reference
        self.subscriber_id = subscriber_id
        super().__init__(self.message)

    def as_dict(self):
        payload = {'error': self.code, 'message': self.message}
        if self.reference is not None:
            payload['reference'] = self.reference
        return payload


class ValidationError(ServiceError):
    status_code = 400
    default_code = 'VALIDATION_ERROR'
    default_message = 'The request is malformed or out of range.'


class NotFoundError(ServiceError):
    status_code = 404
    default_code = 'NOT_FOUND'
    default_message = 'The referenced object does not exist.'


class OwnershipError(ServiceError):
    status_code = 403
    default_code = 'OWNERSHIP_VIOLATION'
    default_message = 'The referenced object does not belong to the caller.'


class BusinessRuleViolation(ServiceError):
    status_code = 409
    default_code = 'BUSINESS_RULE_VIOLATION'
    default_message = 'The request conflicts with a business rule.'


class InternalError(ServiceError):
    pass


# Business rules

class DuplicateActiveSubscription(BusinessRuleViolation):
    default_code = 'DUPLICATE_ACTIVE_SUBSCRIPTION'
    default_message = 'You already have an active subscription.'


class WindowExceeded(BusinessRuleViolation):
    default_code = 'WINDOW_EXCEEDED'
    default_message = 'Only today and tomorrow can be viewed or changed.'


class CutoffPassed(BusinessRuleViolation):
    default_code = 'CUTOFF_PASSED'
    default_message = "Today's meals can no longer be changed after the daily cutoff."


class WalletExpired(BusinessRuleViolation):
    default_code = 'WALLET_EXPIRED'
    default_message = 'Your curry tokens have expired.'


class InsufficientTokens(BusinessRuleViolation):
    default_code = 'INSUFFICIENT_TOKENS'
    default_message = 'You have no curry tokens left.'


class UpgradeAlreadyStarted(BusinessRuleViolation):
    default_code = 'UPGRADE_ALREADY_STARTED'
    default_message = 'An upgrade can only be removed before it starts.'


class UpgradeNotAllowed(BusinessRuleViolation):
    default_code = 'UPGRADE_NOT_ALLOWED'
    default_message = 'Your meal package does not allow this upgrade.'


class InsufficientMembers(BusinessRuleViolation):
    default_code = 'INSUFFICIENT_MEMBERS'
    default_message = 'A delivery group needs at least two items.'


class AlreadyPaused(BusinessRuleViolation):
    default_code = 'ALREADY_PAUSED'
    default_message = 'Paused meals cannot be grouped.'


class DateMismatch(BusinessRuleViolation):
    default_code = 'DATE_MISMATCH'
    default_message = 'All grouped items must be delivered on the same date.'


class AlreadyGrouped(BusinessRuleViolation):
    default_code = 'ALREADY_GROUPED'
    default_message = 'An item already belongs to a delivery group.'


class AlreadyFulfilled(BusinessRuleViolation):
    default_code = 'ALREADY_FULFILLED'
    default_message = 'A fulfilled order cannot be cancelled.'


# Not found

class PackageNotFound(NotFoundError):
    default_code = 'PACKAGE_NOT_FOUND'
    default_message = 'The requested package does not exist.'


class PriceRuleNotFound(NotFoundError):
    default_code = 'PRICE_RULE_NOT_FOUND'
    default_message = 'No price is configured for this upgrade.'


class WalletNotFound(NotFoundError):
    default_code = 'WALLET_NOT_FOUND'
    default_message = 'You have no curry wallet for this diet type.'


# Ownership

class AddressNotOwned(OwnershipError):
    default_code = 'ADDRESS_NOT_OWNED'
    default_message = 'The address does not belong to you.'


class OwnershipViolation(OwnershipError):
    pass


# Validation

class DateOutOfBounds(ValidationError):
    default_code = 'DATE_OUT_OF_BOUNDS'
    default_message = 'The dates fall outside the subscription period.'


class InvalidTransition(ValidationError):
    default_code = 'INVALID_TRANSITION'
    default_message = 'The requested state change is not allowed.'
