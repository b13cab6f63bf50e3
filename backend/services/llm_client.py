import logging
from functools import lru_cache

from groq import Groq
from openai import OpenAI

from config import GROQ_API_KEY, GROQ_MODEL, LLM_PROVIDER, OPENAI_API_KEY, OPENAI_MODEL, HTTP_TIMEOUT

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_client():
    if LLM_PROVIDER == "openai":
        return OpenAI(api_key=OPENAI_API_KEY, timeout=HTTP_TIMEOUT)
    return Groq(api_key=GROQ_API_KEY, timeout=HTTP_TIMEOUT)


def get_model() -> str:
    return OPENAI_MODEL if LLM_PROVIDER == "openai" else GROQ_MODEL


def call_llm(system: str, user: str, temperature: float = 0.0, max_tokens: int = 500) -> str:
    """Single chat completion; returns the stripped text of the first choice."""
    response = get_client().chat.completions.create(
        model=get_model(),
        messages=[
            {"role": "system", "content": system},
            {"role": "user", "content": user},
        ],
        temperature=temperature,
        max_tokens=max_tokens,
    )
    return (response.choices[0].message.content or "").strip()
