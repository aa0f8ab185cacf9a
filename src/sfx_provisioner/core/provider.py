"""SignalFx Provider - Connection configuration for a SignalFx organization."""

from functools import cached_property
from typing import Annotated, Self

from pydantic import AfterValidator, BaseModel, ConfigDict, SecretStr

from sfx_provisioner.core.client import SignalFxClient
from sfx_provisioner.core.urls import DEFAULT_API_URL, DEFAULT_APP_URL, normalize_base_url

BaseURL = Annotated[str, AfterValidator(normalize_base_url)]


class TokenAuth(BaseModel):
    """Session or org token authentication for SignalFx."""

    auth_token: SecretStr


class SignalFxProvider(BaseModel):
    """Connection configuration for a SignalFx organization.

    Both URLs are checked on construction, so a provider built from
    configuration never fails half way through an apply because of a
    malformed realm or app domain.

    Examples:
        # EU realm with a custom app domain
        provider = SignalFxProvider(
            auth=TokenAuth(auth_token="my-token"),
            api_url="https://api.eu0.signalfx.com",
            custom_app_url="https://acme.signalfx.com",
        )
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    api_url: BaseURL = DEFAULT_API_URL
    custom_app_url: BaseURL = DEFAULT_APP_URL
    auth: TokenAuth | None = None

    _injected_client: SignalFxClient | None = None

    @classmethod
    def from_client(
        cls,
        client: SignalFxClient,
        *,
        api_url: str = DEFAULT_API_URL,
        custom_app_url: str = DEFAULT_APP_URL,
    ) -> Self:
        """Create a provider around an existing client (or a test double).

        URLs are stored as given; the chart handler re-checks them at plan
        time.
        """
        provider = cls.model_construct(api_url=api_url, custom_app_url=custom_app_url)
        provider._injected_client = client
        return provider

    @cached_property
    def client(self) -> SignalFxClient:
        if self._injected_client is not None:
            return self._injected_client

        if self.auth is None:
            raise ValueError(
                "Either provide auth, or use SignalFxProvider.from_client() to inject a client"
            )

        return SignalFxClient(self.auth.auth_token.get_secret_value())
