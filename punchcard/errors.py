class LoyaltyError(Exception):
    pass


class InvalidPhoneError(LoyaltyError):
    pass


class InvalidNameError(LoyaltyError):
    pass


class DuplicateCustomerError(LoyaltyError):
    pass


class CustomerNotFoundError(LoyaltyError):
    pass


class NotEligibleError(LoyaltyError):
    pass


class RemoteUnavailableError(LoyaltyError):
    """Remote store could not be reached. Absorbed by the sync client."""
