"""
AI gateway: the narrow capability the orchestrator generates with.

The orchestrator only needs two calls, each retried by the caller:
- plan(prompt) -> mapping parsed from the model's JSON answer
- generate_file_content(prompt) -> raw file text
"""

from typing import Any, Dict, Optional, Protocol, runtime_checkable

from appforge.core.exceptions import AIServiceError
from appforge.core.logging_config import logger
from appforge.modules.orchestrator.prompts import FILE_SYSTEM_PROMPT, PLANNING_SYSTEM_PROMPT
from appforge.utils.claude_client import ClaudeClient
from appforge.utils.response_parser import ResponseParser


@runtime_checkable
class AIGateway(Protocol):
    """Anything that can plan a project and write its files"""

    @property
    def is_configured(self) -> bool:
        ...

    async def plan(self, prompt: str) -> Dict[str, Any]:
        ...

    async def generate_file_content(self, prompt: str) -> str:
        ...


class ClaudeGateway:
    """AIGateway backed by the Anthropic Messages API"""

    def __init__(self, client: Optional[ClaudeClient] = None):
        self.client = client or ClaudeClient()

    @property
    def is_configured(self) -> bool:
        return self.client.is_configured

    async def plan(self, prompt: str) -> Dict[str, Any]:
        response = await self.client.generate(prompt, system_prompt=PLANNING_SYSTEM_PROMPT)
        logger.log_agent_event("ClaudeGateway", "plan", tokens_used=response.get("total_tokens", 0))
        return ResponseParser.extract_json(response["content"])

    async def generate_file_content(self, prompt: str) -> str:
        response = await self.client.generate(prompt, system_prompt=FILE_SYSTEM_PROMPT)
        logger.log_agent_event("ClaudeGateway", "generate_file", tokens_used=response.get("total_tokens", 0))

        content = response["content"]
        if not content.strip():
            raise AIServiceError("Model returned empty file content")
        if response.get("stop_reason") == "max_tokens":
            logger.warning("[ClaudeGateway] File content truncated at max_tokens")
        return content

    async def close(self) -> None:
        await self.client.close()
