"""Alert summaries - AI-written one-liners with canned fallbacks."""

import asyncio
import logging
import random

from ..api import GeminiClient, GenerationOptions
from ..config import SummaryConfig
from ..db import ALERT_TYPE_DUMP, ALERT_TYPE_WHALE
from ..errors import TransientFetchError

logger = logging.getLogger(__name__)

GENERIC_SUMMARY = "Blockchain activity detected requiring attention"
UNKNOWN_EVENT_SUMMARY = "Alert detected on blockchain network"

WHALE_SYSTEM_INSTRUCTION = (
    "You are a crypto analyst providing concise whale movement alerts. Keep "
    "responses under 150 characters and make them informative and professional."
)
DUMP_SYSTEM_INSTRUCTION = (
    "You are a crypto analyst providing concise price dump alerts. Keep "
    "responses under 150 characters and explain the price movement clearly."
)

WHALE_TEMPLATES = (
    "Large {token} transfer detected: {amount} moved by whale wallet {wallet} on {chain}",
    "Whale alert on {chain}: {wallet} transferred {amount} worth of {token}",
    "Significant {token} movement: {amount} moved from whale address {wallet}",
    "Major transaction on {chain}: Whale {wallet} moved {amount} in {token}",
)
DUMP_TEMPLATES = (
    "{token} experienced a sharp {change}% decline on {chain} in the last {timeframe}",
    "Price alert: {token} dropped {change}% within {timeframe} on {chain} network",
    "Sudden price movement: {token} fell {change}% in {timeframe} on {chain}",
    "{token} on {chain} shows {change}% decrease over {timeframe} period",
)


def format_amount(amount: float) -> str:
    """Format a USD amount as $1.23M / $4.56K / $7.89."""
    if amount >= 1_000_000:
        return f"${amount / 1_000_000:.2f}M"
    if amount >= 1_000:
        return f"${amount / 1_000:.2f}K"
    return f"${amount:.2f}"


def shorten_address(address: str | None) -> str:
    """First 6 and last 4 characters of an address."""
    if not address:
        return "unknown"
    if len(address) <= 10:
        return address
    return f"{address[:6]}...{address[-4:]}"


def truncate(text: str, max_length: int = 200) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."


class SummaryGenerator:
    """
    Writes the one-line summary attached to each alert.

    One attempt is made against the text generation client. Without a client
    (no credential), or on any failure, a canned template is filled in
    locally instead, so summarize() always returns text.
    """

    def __init__(
        self,
        config: SummaryConfig,
        client: GeminiClient | None = None,
        rng: random.Random | None = None,
    ):
        self.config = config
        self.client = client
        self.rng = rng or random.Random()
        self.options = GenerationOptions(
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            top_p=config.top_p,
            top_k=config.top_k,
        )

    async def summarize(self, event, event_type: str) -> str:
        """
        Summarize a whale movement or dump candidate.

        Args:
            event: Movement (whale) or DumpCandidate (dump)
            event_type: "whale" or "dump"

        Returns:
            Summary of at most ``config.max_length`` characters
        """
        if event_type not in (ALERT_TYPE_WHALE, ALERT_TYPE_DUMP):
            return UNKNOWN_EVENT_SUMMARY

        if self.client is None:
            return self.fallback(event, event_type)

        try:
            system_instruction, prompt = self._build_prompt(event, event_type)
            text = await asyncio.wait_for(
                self.client.generate(system_instruction, prompt, self.options),
                timeout=self.config.timeout_seconds,
            )
            text = text.strip()
            if not text:
                raise TransientFetchError("empty completion")
            return truncate(text, self.config.max_length)
        except Exception as e:
            logger.warning(f"AI summary failed for {event_type} alert, using template: {e}")
            return self.fallback(event, event_type)

    @staticmethod
    def _build_prompt(event, event_type: str) -> tuple[str, str]:
        if event_type == ALERT_TYPE_WHALE:
            prompt = (
                "Generate a concise alert message for a whale wallet transaction. "
                f"Details: Chain: {event.chain}, Token: {event.token}, "
                f"Amount: {event.amount:.0f}, Wallet: {event.wallet_address[:10]}. "
                "Create a professional, informative one-sentence summary."
            )
            return WHALE_SYSTEM_INSTRUCTION, prompt

        prompt = (
            "Generate a concise alert for a crypto price dump. "
            f"Details: Token: {event.token}, Price Change: {event.price_change:.2f}%, "
            f"Chain: {event.chain}, Timeframe: {event.timeframe}. "
            "Create a professional, informative one-sentence summary explaining the situation."
        )
        return DUMP_SYSTEM_INSTRUCTION, prompt

    def fallback(self, event, event_type: str) -> str:
        """Fill a randomly chosen canned template for the event."""
        if event_type == ALERT_TYPE_WHALE:
            template = WHALE_TEMPLATES[self.rng.randrange(len(WHALE_TEMPLATES))]
            text = template.format(
                token=event.token,
                chain=event.chain,
                amount=format_amount(event.amount),
                wallet=shorten_address(event.wallet_address),
            )
        elif event_type == ALERT_TYPE_DUMP:
            template = DUMP_TEMPLATES[self.rng.randrange(len(DUMP_TEMPLATES))]
            text = template.format(
                token=event.token,
                chain=event.chain,
                change=f"{abs(event.price_change):.2f}",
                timeframe=event.timeframe,
            )
        else:
            text = GENERIC_SUMMARY

        return truncate(text, self.config.max_length)
