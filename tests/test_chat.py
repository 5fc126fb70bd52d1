import asyncio

import pytest

from assistant.chat import ERROR_REPLY, GREETING, ChatAssistant
from core.enums import MessageRole
from core.exceptions import LLMError
from core.models import CellPosition
from grid.store import CellStore

from conftest import FakeLLM


@pytest.fixture
def cells():
    store = CellStore()
    store.set_cell_value(0, 0, "Product")
    store.set_cell_value(1, 1, "15000")
    return store.cells


def test_transcript_starts_with_greeting():
    assistant = ChatAssistant(FakeLLM())
    assert len(assistant.messages) == 1
    assert assistant.messages[0].role == MessageRole.ASSISTANT
    assert assistant.messages[0].content == GREETING


@pytest.mark.asyncio
async def test_streamed_reply_with_formula_offer(cells):
    llm = FakeLLM(chunks=["Use ", "=SUM(B2:B4)", ". It adds Q1."])
    assistant = ChatAssistant(llm)
    seen = []

    reply = await assistant.send(
        "  total Q1 ",
        cells,
        CellPosition(row=4, col=1),
        on_chunk=seen.append,
    )

    assert seen == ["Use ", "=SUM(B2:B4)", ". It adds Q1."]
    assert reply.content == "Use =SUM(B2:B4). It adds Q1."
    assert reply.formula == "=SUM(B2:B4)"
    assert reply.is_streaming is False

    roles = [m.role for m in assistant.messages]
    assert roles == [
        MessageRole.ASSISTANT,
        MessageRole.USER,
        MessageRole.ASSISTANT,
        MessageRole.ASSISTANT,
    ]
    assert assistant.messages[1].content == "total Q1"
    offer = assistant.messages[-1]
    assert offer.content == "Would you like me to apply this formula to B5?"
    assert offer.formula == "=SUM(B2:B4)"
    assert "Selected cell: B5" in llm.prompts[0]
    assert assistant.is_busy is False


@pytest.mark.asyncio
async def test_reply_without_formula_has_no_offer(cells):
    assistant = ChatAssistant(FakeLLM(chunks=["Your data ", "looks tidy."]))

    reply = await assistant.send("thoughts?", cells, CellPosition(row=0, col=0))

    assert reply.formula is None
    assert len(assistant.messages) == 3


@pytest.mark.asyncio
async def test_service_failure_replaces_reply_with_apology(cells):
    assistant = ChatAssistant(FakeLLM(chunks=LLMError("down")))

    reply = await assistant.send("hello", cells, None)

    assert reply.content == ERROR_REPLY
    assert reply.is_streaming is False
    assert assistant.is_busy is False


@pytest.mark.asyncio
async def test_blank_and_concurrent_messages_are_ignored(cells):
    llm = FakeLLM(chunks=["hi"])
    assistant = ChatAssistant(llm)

    assert await assistant.send("   ", cells, None) is None

    assistant.is_busy = True
    assert await assistant.send("hello", cells, None) is None
    assert llm.prompts == []
    assert len(assistant.messages) == 1


@pytest.mark.asyncio
async def test_cancelled_stream_keeps_partial_text(cells):
    cancel = asyncio.Event()
    llm = FakeLLM(chunks=["first ", "second"])
    assistant = ChatAssistant(llm)

    def stop_after_first(chunk):
        cancel.set()

    reply = await assistant.send("go", cells, None, cancel=cancel, on_chunk=stop_after_first)

    assert reply.content == "first "
    assert reply.is_streaming is False


def test_apply_formula_confirms_in_transcript():
    assistant = ChatAssistant(FakeLLM())

    result = assistant.apply_formula("=SUM(B2:B4)", CellPosition(row=4, col=1))

    assert result.formula == "=SUM(B2:B4)"
    assert result.confidence == 90
    assert result.explanation == "Applied from AI chat"
    assert assistant.messages[-1].content == "✅ Formula applied to B5!"


def test_apply_formula_without_selection():
    assistant = ChatAssistant(FakeLLM())
    assert assistant.apply_formula("=1", None) is None
    assert len(assistant.messages) == 1
