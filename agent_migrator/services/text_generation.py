"""Best-effort natural-language summaries from a hosted language model."""

import logging
from typing import List, Optional, Protocol

import openai
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..exceptions import CollaboratorUnavailable

logger = logging.getLogger(__name__)


FALLBACK_SUMMARY = "LLM summary unavailable."


class TextGenerator(Protocol):
    """Anything that turns a prompt into text, raising CollaboratorUnavailable on failure."""

    def generate(self, prompt: str) -> str:
        ...


class TextGenerationService:
    """
    Text generation through a hosted model.

    Supports:
    - OpenAI chat completions (``openai`` client)
    - Hugging Face hosted inference (plain HTTP)

    Every failure (missing key, transport error, bad status, unexpected
    payload) surfaces as ``CollaboratorUnavailable`` so callers can fall
    back to canned text.
    """

    PROVIDERS = ("openai", "huggingface")

    HUGGINGFACE_URL = "https://api-inference.huggingface.co/models"

    SYSTEM_PROMPT = "You are an expert AI migration analyst."

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gpt-3.5-turbo",
        provider: str = "openai",
        timeout: float = 30.0,
        max_tokens: int = 256,
        session: Optional[requests.Session] = None,
        client: Optional[openai.OpenAI] = None
    ):
        """
        Initialize the text generation service.

        Args:
            api_key: API key for the provider
            model: Model to use
            provider: Provider name (openai, huggingface)
            timeout: Request timeout in seconds
            max_tokens: Upper bound on generated tokens
            session: Optional pre-configured requests session (huggingface)
            client: Optional pre-configured OpenAI client (openai)
        """
        if provider not in self.PROVIDERS:
            raise ValueError(f"Unsupported provider: {provider}")
        self.api_key = api_key
        self.model = model
        self.provider = provider
        self.timeout = timeout
        self.max_tokens = max_tokens
        self._session = session
        self._client = client

    def _create_session(self) -> requests.Session:
        """Create a requests session with retry logic."""
        session = requests.Session()

        retries = Retry(
            total=2,
            backoff_factor=1.0,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["POST"],
        )
        adapter = HTTPAdapter(max_retries=retries)
        session.mount("https://", adapter)
        session.mount("http://", adapter)

        session.headers["Content-Type"] = "application/json"
        return session

    def _openai_client(self) -> openai.OpenAI:
        if self._client is None:
            self._client = openai.OpenAI(api_key=self.api_key, timeout=self.timeout, max_retries=2)
        return self._client

    def _huggingface_session(self) -> requests.Session:
        if self._session is None:
            self._session = self._create_session()
        return self._session

    def generate(self, prompt: str) -> str:
        """Generate text for ``prompt``."""
        if not self.api_key:
            raise CollaboratorUnavailable(self.provider, "No API key configured")

        if self.provider == "openai":
            text = self._call_openai(prompt)
        else:
            text = self._call_huggingface(prompt)

        if not text:
            raise CollaboratorUnavailable(self.provider, "Empty response from provider")
        return text.strip()

    def _call_openai(self, prompt: str) -> Optional[str]:
        """Call the OpenAI chat completions API."""
        try:
            response = self._openai_client().chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": self.SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                max_tokens=self.max_tokens,
            )
        except openai.OpenAIError as e:
            raise CollaboratorUnavailable("openai", f"OpenAI request failed: {e}") from e

        if not response.choices:
            return None
        return response.choices[0].message.content

    def _call_huggingface(self, prompt: str) -> Optional[str]:
        """Call the Hugging Face hosted inference API."""
        url = f"{self.HUGGINGFACE_URL}/{self.model}"
        payload = {
            "inputs": f"{self.SYSTEM_PROMPT}\n\n{prompt}",
            "parameters": {"max_new_tokens": self.max_tokens, "return_full_text": False},
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        try:
            response = self._huggingface_session().post(
                url, json=payload, headers=headers, timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "?"
            raise CollaboratorUnavailable("huggingface", f"HTTP error: {status}") from e
        except (requests.exceptions.RequestException, ValueError) as e:
            raise CollaboratorUnavailable("huggingface", f"Request failed: {e}") from e

        # Hugging Face returns a list of generations
        if isinstance(data, list) and data:
            return data[0].get("generated_text")
        if isinstance(data, dict):
            return data.get("generated_text")
        return None


class StaticTextGenerator:
    """Returns canned text; records the prompts it was given."""

    def __init__(self, text: str = ""):
        self.text = text
        self.prompts: List[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.text


def generate_or_fallback(
    generator: Optional[TextGenerator],
    prompt: str,
    fallback: str = FALLBACK_SUMMARY
) -> str:
    """
    Call ``generator`` and downgrade any unavailability to ``fallback``.

    A missing generator counts as unavailable, and so does a generator that
    fails in any other way.
    """
    if generator is None:
        return fallback
    try:
        return generator.generate(prompt)
    except CollaboratorUnavailable as e:
        logger.warning(f"Text generation unavailable ({e.collaborator}): {e}; using fallback")
        return fallback
    except Exception as e:
        logger.warning(f"Text generation failed: {e}; using fallback")
        return fallback
