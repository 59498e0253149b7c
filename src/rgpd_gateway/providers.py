"""LLM providers the gateway can dispatch to.

The gateway only relies on ``invoke(llm_input) -> LLMOutput``.  Which
provider is used is decided once, from configuration, when the gateway
is built.  Real backends register themselves in ``PROVIDERS``.
"""

from __future__ import annotations
from typing import Callable, Protocol

from .errors import ConfigurationError, ProviderError
from .types import LLMInput, LLMOutput


class Provider(Protocol):
    name: str

    def invoke(self, llm_input: LLMInput) -> LLMOutput: ...


def prompt_from_input(llm_input: LLMInput) -> str:
    """Flatten text or messages into a single prompt string."""
    if llm_input.text:
        return llm_input.text
    if llm_input.messages:
        return "\n".join(
            f"{m.get('role', 'user')}: {m.get('content', '')}" for m in llm_input.messages
        )
    raise ProviderError("no prompt provided (text or messages required)")


class StubProvider:
    """Echoes the prompt back.  Used in development and tests."""

    name = "stub"

    def __init__(self, model: str = "stub-echo") -> None:
        self.model = model

    def invoke(self, llm_input: LLMInput) -> LLMOutput:
        prompt = prompt_from_input(llm_input)
        words = len(prompt.split())
        return LLMOutput(
            text=prompt,
            provider=self.name,
            model=self.model,
            usage={"prompt_tokens": words, "completion_tokens": words},
        )


PROVIDERS: dict[str, Callable[..., Provider]] = {
    "stub": StubProvider,
}


def get_provider(name: str, **options) -> Provider:
    """Instantiate a registered provider by name."""
    try:
        factory = PROVIDERS[name]
    except KeyError:
        raise ConfigurationError(
            f"unknown provider '{name}' (available: {', '.join(sorted(PROVIDERS))})"
        ) from None
    return factory(**options)
