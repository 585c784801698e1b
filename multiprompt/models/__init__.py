from multiprompt.models.provider_credential import ProviderCredential
from multiprompt.models.user import User

__all__ = [
    "ProviderCredential",
    "User",
]
