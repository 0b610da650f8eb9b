from .loader import (
    DEFAULT_CONFIG_TEMPLATE,
    load_config,
    set_config_value,
    user_config_path,
)
from .models import (
    PROVIDER_DEFAULTS,
    AutoMessageConfig,
    ChangelogSettings,
    LLMSettings,
    Provider,
    ProviderDefaults,
)

__all__ = [
    "AutoMessageConfig",
    "ChangelogSettings",
    "DEFAULT_CONFIG_TEMPLATE",
    "LLMSettings",
    "PROVIDER_DEFAULTS",
    "Provider",
    "ProviderDefaults",
    "load_config",
    "set_config_value",
    "user_config_path",
]
