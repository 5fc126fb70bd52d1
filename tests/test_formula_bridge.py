import pytest

from assistant.formula import FormulaBridge
from core.exceptions import LLMError
from core.models import FormulaRequest
from grid.store import CellStore

from conftest import FakeLLM


@pytest.mark.asyncio
async def test_structured_response():
    llm = FakeLLM(responses=['{"formula": "=SUM(B2:B4)", "explanation": "Q1 total", "confidence": 95}'])
    bridge = FormulaBridge(llm)

    result = await bridge.execute(FormulaRequest(query="total Q1 sales", selected_cell="B5"))

    assert result.formula == "=SUM(B2:B4)"
    assert result.explanation == "Q1 total"
    assert result.confidence == 95
    assert "Currently selected cell: B5" in llm.prompts[0]
    assert llm.max_tokens == [300]
    assert bridge.is_busy is False


@pytest.mark.asyncio
async def test_unstructured_response_uses_formula_line():
    llm = FakeLLM(responses=["You could use:\n=MAX(C2:C4)\nto find the best quarter"])
    result = await FormulaBridge(llm).execute(FormulaRequest(query="best Q2"))

    assert result.formula == "=MAX(C2:C4)"
    assert result.explanation == "AI-generated formula based on your request"
    assert result.confidence == 80


@pytest.mark.asyncio
async def test_unstructured_response_without_formula_uses_default():
    llm = FakeLLM(responses=["I am not sure what you mean."])
    result = await FormulaBridge(llm).execute(FormulaRequest(query="hmm"))

    assert result.formula == "=SUM(A1:A10)"
    assert result.confidence == 80


@pytest.mark.asyncio
async def test_service_failure_uses_default():
    llm = FakeLLM(responses=[LLMError("service down")])
    result = await FormulaBridge(llm).execute(FormulaRequest(query="total"))

    assert result.formula == "=SUM(A1:A10)"
    assert result.explanation == "Default sum formula (AI service unavailable)"
    assert result.confidence == 50


@pytest.mark.asyncio
async def test_blank_query_is_ignored():
    llm = FakeLLM()
    bridge = FormulaBridge(llm)

    assert await bridge.execute(FormulaRequest(query="   ")) is None
    assert llm.prompts == []


@pytest.mark.asyncio
async def test_busy_bridge_ignores_new_requests():
    llm = FakeLLM(responses=['{"formula": "=1", "confidence": 10}'])
    bridge = FormulaBridge(llm)
    bridge.is_busy = True

    assert await bridge.execute(FormulaRequest(query="total")) is None
    assert llm.prompts == []


@pytest.mark.asyncio
async def test_json_with_invalid_confidence_keeps_its_formula():
    llm = FakeLLM(responses=['{"formula": "=A1*2", "explanation": "double", "confidence": "95%"}'])
    result = await FormulaBridge(llm).execute(FormulaRequest(query="double A1"))

    assert result.formula == "=A1*2"
    assert result.confidence == 80

    store = CellStore()
    store.set_cell_value(0, 0, "4")
    assert store.set_cell_value(0, 1, result.formula).value == "8"


@pytest.mark.asyncio
async def test_json_with_out_of_range_confidence_keeps_its_formula():
    llm = FakeLLM(responses=['{"formula": "=B2+C2", "explanation": "sum", "confidence": 250}'])
    result = await FormulaBridge(llm).execute(FormulaRequest(query="row total"))

    assert result.formula == "=B2+C2"


@pytest.mark.asyncio
async def test_json_without_usable_formula_scans_text():
    llm = FakeLLM(responses=['{"formula": "SUM(B2:B4)", "explanation": "Try =MAX(B2:B4)", "confidence": 90}'])
    result = await FormulaBridge(llm).execute(FormulaRequest(query="total"))

    assert result.formula == "=MAX(B2:B4)"
