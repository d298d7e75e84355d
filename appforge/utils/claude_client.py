from anthropic import AsyncAnthropic, APIStatusError, APIConnectionError, APITimeoutError
from typing import Optional, Dict, List, Any
import httpx

from appforge.core.config import Settings, settings as default_settings
from appforge.core.exceptions import AIServiceError
from appforge.core.logging_config import logger


RETRYABLE_STATUS_CODES = [429, 500, 502, 503, 529]


class ClaudeClient:
    """
    Thin wrapper over the Anthropic async client.

    Makes a single attempt per call; retry policy belongs to the caller so
    that attempts are counted in one place.
    """

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or default_settings
        self.model = self.config.CLAUDE_MODEL
        self._client: Optional[AsyncAnthropic] = None

    @property
    def is_configured(self) -> bool:
        return self.config.has_api_key

    @property
    def client(self) -> AsyncAnthropic:
        """Lazily build the SDK client so an unconfigured key fails on use, not import"""
        if self._client is None:
            if not self.is_configured:
                raise AIServiceError("API key not configured")

            client_kwargs: Dict[str, Any] = {"api_key": self.config.ANTHROPIC_API_KEY.strip()}

            # Only set base_url if it's a non-empty string with actual content
            if self.config.ANTHROPIC_BASE_URL and self.config.ANTHROPIC_BASE_URL.strip():
                client_kwargs["base_url"] = self.config.ANTHROPIC_BASE_URL.strip()
                logger.info(f"[ClaudeClient] Using custom base URL: {client_kwargs['base_url']}")

            request_timeout = float(self.config.CLAUDE_REQUEST_TIMEOUT)
            client_kwargs["timeout"] = httpx.Timeout(
                connect=float(self.config.CLAUDE_CONNECT_TIMEOUT),
                read=request_timeout,
                write=request_timeout,
                pool=request_timeout,
            )

            self._client = AsyncAnthropic(**client_kwargs)
            logger.info(f"[ClaudeClient] Initialized: model={self.model}, timeout={request_timeout}s")
        return self._client

    @staticmethod
    def is_retryable_error(error: Exception) -> bool:
        """Overload, rate limit and network errors are worth another attempt"""
        if isinstance(error, (APIConnectionError, APITimeoutError)):
            return True
        if isinstance(error, (httpx.ConnectError, httpx.TimeoutException, httpx.NetworkError)):
            return True
        if isinstance(error, APIStatusError):
            return error.status_code in RETRYABLE_STATUS_CODES
        return False

    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        messages: Optional[List[Dict[str, str]]] = None,
    ) -> Dict[str, Any]:
        """
        Generate a non-streaming response.

        Returns:
            Dict with content and usage metadata
        """
        messages = list(messages or [])
        messages.append({"role": "user", "content": prompt})

        if max_tokens is None:
            max_tokens = self.config.CLAUDE_MAX_TOKENS
        if temperature is None:
            temperature = self.config.CLAUDE_TEMPERATURE

        logger.info(f"[ClaudeClient] Request: model={self.model}, max_tokens={max_tokens}, prompt_len={len(prompt)}")

        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                temperature=temperature,
                system=system_prompt or "",
                messages=messages,
            )
        except Exception as e:
            logger.error(
                f"[ClaudeClient] API error: {type(e).__name__}: {e}",
                extra={
                    "event_type": "claude_api_error",
                    "error_type": type(e).__name__,
                    "retryable": self.is_retryable_error(e),
                },
            )
            raise

        content = "".join(
            block.text for block in response.content if getattr(block, "type", "text") == "text"
        )
        result = {
            "content": content,
            "model": self.model,
            "input_tokens": response.usage.input_tokens,
            "output_tokens": response.usage.output_tokens,
            "total_tokens": response.usage.input_tokens + response.usage.output_tokens,
            "stop_reason": response.stop_reason,
            "id": response.id,
        }

        logger.info(f"[ClaudeClient] Response: id={response.id}, tokens={result['total_tokens']}, stop={response.stop_reason}")
        return result

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
