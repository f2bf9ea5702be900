"""Summary generation via the Anthropic Messages API."""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from typing import TYPE_CHECKING

import anthropic
from anthropic.types import Message, TextBlock

from file_insight.errors import OracleError

if TYPE_CHECKING:
    from file_insight.config import AppConfig

logger = logging.getLogger(__name__)

# Default content size limit per file
DEFAULT_MAX_FILE_CONTENT_BYTES = 8192

# Rate-limit defaults
DEFAULT_MAX_RETRIES = 3
DEFAULT_REQUEST_DELAY = 0.0

DEFAULT_MODEL = "claude-haiku-4-5-20251001"

FILE_SEPARATOR = "\n\n===FILE SEPARATOR===\n\n"


def _extract_text(message: Message) -> str:
    """Extract the text from the first TextBlock in a message response.

    Args:
        message: Anthropic Message response.

    Returns:
        Text content from the first TextBlock.

    Raises:
        ValueError: If no TextBlock is found in the response.
    """
    for block in message.content:
        if isinstance(block, TextBlock):
            return block.text
    raise ValueError("No TextBlock found in Anthropic response")


def truncate_utf8(text: str, max_bytes: int) -> str:
    """Cut ``text`` to at most ``max_bytes`` of UTF-8 without splitting a character."""
    encoded = text.encode("utf-8")
    if len(encoded) <= max_bytes:
        return text
    return encoded[:max_bytes].decode("utf-8", errors="ignore")


def build_summary_prompt(content: str, word_budget: int, language: str) -> str:
    return (
        f"Provide a detailed summary of the following file content in approximately "
        f"{word_budget} words in {language}. "
        f"Focus on its main purpose, key elements, and important details:\n\n{content}"
    )


def build_sql_prompt(content: str, word_budget: int, language: str) -> str:
    return (
        f"Analyze the following SQL code and provide a summary of approximately "
        f"{word_budget} words in {language}. "
        f"Focus on: table operations (CREATE, ALTER, DROP), main table names, "
        f"key relationships, and important constraints or indices if present:\n\n{content}"
    )


def build_query_prompt(query: str, content: str, language: str) -> str:
    return f"{query} (respond in {language})\n\n{content}"


def format_batch_files(files: Sequence[tuple[str, str]]) -> str:
    """Join ``(path, content)`` pairs with an explicit per-file delimiter."""
    return FILE_SEPARATOR.join(f"File: {path}\nContent:\n{content}" for path, content in files)


def build_batch_summary_prompt(
    files: Sequence[tuple[str, str]], length_label: str, word_budget: int, language: str
) -> str:
    return (
        f"Analyze multiple files and provide a {length_label} summary for each "
        f"({word_budget} words) in {language}. "
        f"Focus on the main purpose of each file. "
        f"Use the exact file path as the label and format the response as:\n"
        f"path/to/file1: Summary of first file\n"
        f"path/to/file2: Summary of second file\n"
        f"And so on.\n\n"
        f"{format_batch_files(files)}"
    )


def build_batch_query_prompt(
    query: str, files: Sequence[tuple[str, str]], language: str
) -> str:
    return (
        f"{query} (respond in {language})\n\n"
        f"Analyze the following files to answer the question:\n\n"
        f"{format_batch_files(files)}"
    )


class AnthropicDescriber:
    """Generates file summaries and answers using Claude."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        max_file_content_bytes: int = DEFAULT_MAX_FILE_CONTENT_BYTES,
        max_retries: int = DEFAULT_MAX_RETRIES,
        request_delay: float = DEFAULT_REQUEST_DELAY,
    ) -> None:
        """Initialise the Anthropic client.

        Args:
            api_key: Anthropic API key.
            model: Model identifier to use for generation.
            max_file_content_bytes: Max bytes of file content per prompt.
            max_retries: Max retry attempts for failed requests (SDK built-in).
            request_delay: Seconds to sleep before each API call to throttle throughput.
        """
        self._client = anthropic.Anthropic(api_key=api_key, max_retries=max_retries)
        self._model = model
        self._max_file_content_bytes = max_file_content_bytes
        self._request_delay = request_delay

    def complete(self, prompt: str, max_tokens: int) -> str:
        """Send one prompt and return the text of the reply.

        Args:
            prompt: User prompt text.
            max_tokens: Token budget for the reply.

        Returns:
            Reply text.

        Raises:
            OracleError: If the API call fails or the reply has no text.
        """
        if self._request_delay > 0:
            time.sleep(self._request_delay)
        logger.info(
            "[complete] sending prompt; model:%s;prompt_chars:%d;max_tokens:%d",
            self._model,
            len(prompt),
            max_tokens,
        )
        try:
            message = self._client.messages.create(
                model=self._model,
                max_tokens=max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
            result = _extract_text(message)
        except anthropic.APIError as exc:
            logger.error("[complete] request failed; error:%s", exc)
            raise OracleError(f"Anthropic request failed: {exc}") from exc
        except ValueError as exc:
            logger.error("[complete] unusable response; error:%s", exc)
            raise OracleError(str(exc)) from exc
        logger.debug("[complete] received response; chars:%d", len(result))
        return result

    def summarize_file(
        self,
        filename: str,
        content: str,
        max_tokens: int,
        language: str,
        interpreter: str | None = None,
        query: str | None = None,
    ) -> str:
        """Summarize one file, or answer a custom query about it.

        SQL files get a prompt focused on schema operations. Content is
        truncated to ``max_file_content_bytes``.

        Args:
            filename: Path or name of the file, for logging.
            content: Decoded file content.
            max_tokens: Token budget for the summary.
            language: Target summary language.
            interpreter: Interpreter tag from classification.
            query: Custom question replacing the default summary request.

        Returns:
            Summary or answer text.

        Raises:
            OracleError: If the request fails.
        """
        truncated = truncate_utf8(content, self._max_file_content_bytes)
        if query is not None:
            prompt = build_query_prompt(query, truncated, language)
        elif interpreter == "sql":
            prompt = build_sql_prompt(truncated, max_tokens, language)
        else:
            prompt = build_summary_prompt(truncated, max_tokens, language)

        logger.info(
            "[summarize_file] summarizing; filename:%s;content_bytes:%d;interpreter:%s",
            filename,
            len(truncated.encode("utf-8")),
            interpreter,
        )
        return self.complete(prompt, max_tokens)


def anthropic_describer_from_config(config: AppConfig, api_key: str) -> AnthropicDescriber:
    """Construct an AnthropicDescriber from application configuration.

    Args:
        config: Application configuration instance.
        api_key: Credential resolved by ``require_api_key``.

    Returns:
        Configured AnthropicDescriber instance.
    """
    return AnthropicDescriber(
        api_key=api_key,
        model=config.anthropic_model,
        max_file_content_bytes=config.max_file_content_bytes,
        max_retries=config.anthropic_max_retries,
        request_delay=config.anthropic_request_delay,
    )
