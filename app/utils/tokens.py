"""Token estimation for inbound messages."""

import tiktoken

from app.utils.logging import get_logger

logger = get_logger(__name__)


class TokenCounter:
    """Approximate token counter used to reject oversized user input."""

    tokenizer: tiktoken.Encoding | None = None

    def __init__(self, max_message_tokens: int = 2000):
        self.max_message_tokens = max_message_tokens

        try:
            # Close enough for every supported provider
            self.tokenizer = tiktoken.get_encoding("cl100k_base")
        except Exception as e:
            logger.warning(f"Tokenizer unavailable, falling back to character estimate: {e}")
            self.tokenizer = None

    def estimate(self, message: str) -> int:
        """Estimate token count for a single message."""
        try:
            return len(self.tokenizer.encode(message)) if self.tokenizer else len(message) // 4
        except Exception:
            # Roughly 4 characters per token
            return len(message) // 4

    def validate(self, message: str) -> None:
        """Validate that a message doesn't exceed the token limit.

        Raises:
            ValueError: If message exceeds token limit
        """
        token_count = self.estimate(message)
        if token_count > self.max_message_tokens:
            raise ValueError(
                f"Your message is too long ({token_count} tokens). "
                f"Please keep messages under {self.max_message_tokens} tokens."
            )
