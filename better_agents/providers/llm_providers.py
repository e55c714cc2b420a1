"""LLM provider descriptors.

Each provider knows which environment variables carry its credentials, where
users obtain a key, and how those credentials are written to the generated
project's .env file.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from better_agents.project_config import ProjectConfig
from better_agents.providers.base import Capability, Provider


def require_min_length(value: str) -> Optional[str]:
    if not value or len(value.strip()) < 5:
        return "API key is required and must be at least 5 characters"
    return None


def _validate_openai_key(value: str) -> Optional[str]:
    problem = require_min_length(value)
    if problem:
        return problem
    if not value.strip().startswith("sk-"):
        return "OpenAI API keys start with 'sk-'"
    return None


@dataclass(frozen=True)
class CredentialField:
    """An extra credential a provider needs besides its API key."""

    key: str
    label: str
    env_vars: tuple[str, ...]
    secret: bool = True
    default: Optional[str] = None


@dataclass(frozen=True)
class LLMKnowledge:
    model_example: str
    # Lines for the generated .env file, in order.
    env_lines: tuple[str, ...]


class LLMProvider(Provider):
    capabilities = frozenset({Capability.KNOWLEDGE})

    def __init__(
        self,
        id: str,
        display_name: str,
        api_key_env_vars: tuple[str, ...],
        api_key_url: str,
        model_example: str,
        additional_credentials: tuple[CredentialField, ...] = (),
        validate_api_key: Callable[[str], Optional[str]] = require_min_length,
    ):
        self.id = id
        self.display_name = display_name
        self.api_key_env_vars = api_key_env_vars
        self.api_key_url = api_key_url
        self.model_example = model_example
        self.additional_credentials = additional_credentials
        self.validate_api_key = validate_api_key

    @property
    def primary_env_var(self) -> str:
        return self.api_key_env_vars[0]

    def get_knowledge(self, config: ProjectConfig) -> LLMKnowledge:
        lines = [f"{self.primary_env_var}={config.llm_api_key}"]
        for credential in self.additional_credentials:
            value = config.llm_additional_inputs.get(credential.key, credential.default)
            if value:
                lines.append(f"{credential.env_vars[0]}={value}")
        return LLMKnowledge(model_example=self.model_example, env_lines=tuple(lines))


OPENAI = LLMProvider(
    "openai",
    "OpenAI",
    api_key_env_vars=("OPENAI_API_KEY",),
    api_key_url="https://platform.openai.com/api-keys",
    model_example="gpt-4o",
    validate_api_key=_validate_openai_key,
)

ANTHROPIC = LLMProvider(
    "anthropic",
    "Anthropic (Claude)",
    api_key_env_vars=("ANTHROPIC_API_KEY",),
    api_key_url="https://console.anthropic.com/settings/keys",
    model_example="claude-3-5-sonnet-latest",
)

GEMINI = LLMProvider(
    "gemini",
    "Google Gemini",
    api_key_env_vars=("GOOGLE_API_KEY", "GEMINI_API_KEY"),
    api_key_url="https://aistudio.google.com/app/apikey",
    model_example="gemini-1.5-pro",
)

BEDROCK = LLMProvider(
    "bedrock",
    "AWS Bedrock",
    api_key_env_vars=("AWS_ACCESS_KEY_ID",),
    api_key_url="https://console.aws.amazon.com/iam/home#/security_credentials",
    model_example="anthropic.claude-3-5-sonnet-20240620-v1:0",
    additional_credentials=(
        CredentialField(
            key="aws_secret_access_key",
            label="AWS Secret Access Key",
            env_vars=("AWS_SECRET_ACCESS_KEY",),
        ),
        CredentialField(
            key="aws_region",
            label="AWS Region",
            env_vars=("AWS_REGION",),
            secret=False,
            default="us-east-1",
        ),
    ),
)

OPENROUTER = LLMProvider(
    "openrouter",
    "OpenRouter",
    api_key_env_vars=("OPENROUTER_API_KEY",),
    api_key_url="https://openrouter.ai/keys",
    model_example="openai/gpt-4o",
)

GROK = LLMProvider(
    "grok",
    "xAI (Grok)",
    api_key_env_vars=("XAI_API_KEY",),
    api_key_url="https://console.x.ai/",
    model_example="grok-1",
)

LLM_PROVIDERS = [OPENAI, ANTHROPIC, GEMINI, BEDROCK, OPENROUTER, GROK]


def model_example_for(provider_id: str) -> str:
    """Example model id for a provider, defaulting to the OpenAI one."""
    for provider in LLM_PROVIDERS:
        if provider.id == provider_id:
            return provider.model_example
    return OPENAI.model_example
