"""Thin wrapper around the Groq chat-completions API used by every agent."""

from app.core.errors import LLMCallFailedError
from app.core.settings import Settings
from app.core.utils import get_logger, truncate

logger = get_logger("money-whisper.agent")


class LLMClient:
    """Send a single user prompt to the configured model and return its text reply."""

    def __init__(self, llm_client: object, settings: Settings) -> None:
        """Initialize with a Groq-compatible client and settings."""
        self.llm_client = llm_client
        self.settings = settings

    def generate(self, prompt: str, temperature: float, max_tokens: int) -> str:
        """Run one completion; raises LLMCallFailedError if the provider call fails."""
        logger.info(f"AGENT: Calling LLM {self.settings.llm_model} (temperature={temperature}, max_tokens={max_tokens})")
        logger.debug(f"PROMPT: {truncate(prompt)}")
        try:
            completion = self.llm_client.chat.completions.create(
                model=self.settings.llm_model,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
                max_completion_tokens=max_tokens,
                top_p=self.settings.llm_top_p,
                stream=self.settings.llm_stream,
            )
        except Exception as exc:
            msg = f"Groq API call failed: {exc}"
            logger.exception(msg)
            raise LLMCallFailedError(msg) from exc
        if self.settings.llm_stream:
            return self._collect_llm_output(completion)
        return completion.choices[0].message.content or ""

    def _collect_llm_output(self, completion: object) -> str:
        """Collect the full output from the LLM completion stream."""
        raw_output = ""
        try:
            for chunk in completion:
                text = chunk.choices[0].delta.content or ""
                raw_output += text
        except Exception as exc:
            msg = f"Groq streaming error: {exc}"
            logger.exception(msg)
            raise LLMCallFailedError(msg, raw_response=raw_output) from exc
        return raw_output
