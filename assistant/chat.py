"""Streaming chat assistant with formula detection"""

import asyncio
import uuid
from typing import Callable, List, Mapping, Optional

from config import settings
from core.enums import MessageRole
from core.exceptions import LLMError
from core.interfaces import TextGenerator
from core.models import Cell, CellPosition, ChatMessage, FormulaResult
from llm.prompts import ChatPrompt
from utils.addressing import address
from utils.logging import get_logger

logger = get_logger(__name__)

GREETING = (
    "Hi! I'm your AI spreadsheet assistant. I can help you create formulas, "
    "analyze data, and provide insights. What would you like to do?"
)
ERROR_REPLY = "Sorry, I encountered an error. Please try again."
APPLIED_EXPLANATION = "Applied from AI chat"
APPLIED_CONFIDENCE = 90


def _new_message(role: MessageRole, content: str = "", **kwargs) -> ChatMessage:
    return ChatMessage(id=str(uuid.uuid4()), role=role, content=content, **kwargs)


class ChatAssistant:
    """Keeps the chat transcript and streams assistant replies into it"""

    def __init__(self, llm: TextGenerator):
        self.llm = llm
        self.prompt = ChatPrompt()
        self.messages: List[ChatMessage] = [_new_message(MessageRole.ASSISTANT, GREETING)]
        self.is_busy = False

    def _replace(self, message_id: str, **changes) -> ChatMessage:
        for index, message in enumerate(self.messages):
            if message.id == message_id:
                updated = message.model_copy(update=changes)
                self.messages[index] = updated
                return updated
        raise KeyError(message_id)

    def _context_cells(self, cells: Mapping[str, Cell]) -> list:
        sample = list(cells.values())[:settings.CHAT_CONTEXT_CELLS]
        return [
            {"id": cell.id, "value": cell.value, "type": cell.type.value}
            for cell in sample
        ]

    async def send(
        self,
        text: str,
        cells: Mapping[str, Cell],
        selection: Optional[CellPosition],
        cancel: Optional[asyncio.Event] = None,
        on_chunk: Optional[Callable[[str], None]] = None,
    ) -> Optional[ChatMessage]:
        """Send a user message and stream the reply into the transcript.

        ``on_chunk`` additionally receives each raw text increment.
        Returns the final assistant message, or None when ``text`` is blank
        or a reply is already streaming.
        """
        text = text.strip()
        if not text or self.is_busy:
            return None

        self.is_busy = True
        try:
            self.messages.append(_new_message(MessageRole.USER, text))
            reply = _new_message(MessageRole.ASSISTANT, is_streaming=True)
            self.messages.append(reply)

            selected = address(selection.row, selection.col) if selection else None
            prompt = self.prompt.build_prompt({
                "selected_cell": selected,
                "cells": self._context_cells(cells),
                "request": text,
            })

            collected: List[str] = []

            def _grow(chunk: str) -> None:
                collected.append(chunk)
                self._replace(reply.id, content="".join(collected))
                if on_chunk is not None:
                    on_chunk(chunk)

            try:
                full_text = await self.llm.stream(
                    prompt,
                    _grow,
                    system=ChatPrompt.SYSTEM,
                    max_tokens=settings.CHAT_MAX_TOKENS,
                    cancel=cancel,
                )
            except LLMError as e:
                logger.warning("Chat request failed", error=str(e))
                return self._replace(reply.id, content=ERROR_REPLY, is_streaming=False)

            formula = self.prompt.parse_response(full_text)
            final = self._replace(reply.id, content=full_text, formula=formula, is_streaming=False)
            if formula:
                target = selected or "the selected cell"
                self.messages.append(_new_message(
                    MessageRole.ASSISTANT,
                    f"Would you like me to apply this formula to {target}?",
                    formula=formula,
                ))
            return final
        finally:
            self.is_busy = False

    def apply_formula(self, formula: str, selection: Optional[CellPosition]) -> Optional[FormulaResult]:
        """Turn a chat formula into a result to write into the selected cell"""
        if selection is None:
            return None
        self.messages.append(_new_message(
            MessageRole.ASSISTANT,
            f"✅ Formula applied to {address(selection.row, selection.col)}!",
        ))
        return FormulaResult(
            formula=formula,
            explanation=APPLIED_EXPLANATION,
            confidence=APPLIED_CONFIDENCE,
        )
