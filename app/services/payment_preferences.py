"""
Payment Preferences - which payment method each user has selected.

The selected method becomes a ``GatewayCredentials`` value for every call the
user makes, so switching methods never mutates the shared gateway.
"""

import enum
from typing import Dict, Optional

from app.core.config import settings
from app.core.logging_config import get_logger
from app.services.mcp_gateway import GatewayCredentials

logger = get_logger(__name__)


class PaymentMethod(str, enum.Enum):
    APIKEY = "apikey"
    ATXP = "atxp"


class PaymentPreferences:
    """In-memory per-user payment method, falling back to a default"""

    def __init__(
        self,
        default: PaymentMethod = PaymentMethod.APIKEY,
        api_key: Optional[str] = None,
        atxp_connection_string: Optional[str] = None,
    ):
        self.default = PaymentMethod(default)
        self.api_key = api_key
        self.atxp_connection_string = atxp_connection_string
        self._methods: Dict[str, PaymentMethod] = {}

    def get(self, user_id: str) -> PaymentMethod:
        return self._methods.get(user_id, self.default)

    def set(self, user_id: str, method: PaymentMethod) -> PaymentMethod:
        method = PaymentMethod(method)
        previous = self.get(user_id)
        self._methods[user_id] = method
        logger.info(
            "payment_method_changed",
            user_id=user_id,
            previous=previous.value,
            payment_method=method.value,
        )
        return method

    @property
    def atxp_configured(self) -> bool:
        return bool(self.atxp_connection_string)

    def credentials_for(self, user_id: str) -> GatewayCredentials:
        """
        Credentials for the user's next call.

        ATXP mode sends the ATXP connection string when one is configured,
        otherwise the API key.
        """
        method = self.get(user_id)
        if method is PaymentMethod.ATXP and self.atxp_connection_string:
            api_key = self.atxp_connection_string
        else:
            api_key = self.api_key
        return GatewayCredentials(api_key=api_key, payment_method=method.value)


# Global payment preferences instance
payment_preferences = PaymentPreferences(
    default=PaymentMethod(settings.DEFAULT_PAYMENT_METHOD),
    api_key=settings.MCP_API_KEY,
    atxp_connection_string=settings.ATXP_CONNECTION_STRING,
)
