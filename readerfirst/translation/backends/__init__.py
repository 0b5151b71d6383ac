"""Translation backend implementations."""

from typing import Optional

import httpx

from readerfirst.core.exceptions import ConfigurationError
from readerfirst.core.models import PROVIDERS, TranslationProviderConfig
from readerfirst.utils.http import RetryPolicy
from .openai_backend import OpenAIBackend
from .deepl_backend import DeepLBackend
from ..base import TranslationBackend

BACKENDS = {
    "openai": OpenAIBackend,
    "deepl": DeepLBackend,
}


def create_backend(
    provider_config: TranslationProviderConfig,
    client: Optional[httpx.AsyncClient] = None,
    retry: Optional[RetryPolicy] = None,
    **kwargs
) -> TranslationBackend:
    """
    Build the backend for a provider configuration.

    Raises:
        ConfigurationError: unknown provider or missing API key (checked
            before any network call)
    """
    backend_cls = BACKENDS.get(provider_config.provider)
    if backend_cls is None:
        raise ConfigurationError(
            f"Unknown translation provider: {provider_config.provider}",
            config_key="translation.provider",
            invalid_value=provider_config.provider,
            valid_values=list(PROVIDERS),
        )
    if not provider_config.is_configured:
        raise ConfigurationError(
            f"No API key configured for provider '{provider_config.provider}'",
            config_key=f"api_keys.{provider_config.provider}",
        )
    return backend_cls(
        api_key=provider_config.api_key,
        model=provider_config.model,
        client=client,
        retry=retry,
        **kwargs
    )


__all__ = [
    'OpenAIBackend',
    'DeepLBackend',
    'BACKENDS',
    'create_backend',
]
