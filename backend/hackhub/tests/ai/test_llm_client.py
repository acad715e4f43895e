from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pydantic import BaseModel

from hackhub.ai.llm_client import (
    EmptyCompletionError,
    LLMClient,
    LLMNotConfiguredError,
    json_candidates,
    strip_code_fences,
)


class DummyModel(BaseModel):
    name: str
    age: int


def mock_openai(*contents: str) -> tuple[AsyncMock, MagicMock]:
    responses = []
    for content in contents:
        mock_message = MagicMock()
        mock_message.content = content
        mock_choice = MagicMock()
        mock_choice.message = mock_message
        mock_response = MagicMock()
        mock_response.choices = [mock_choice]
        responses.append(mock_response)

    mock_completions = MagicMock()
    mock_completions.create = AsyncMock(side_effect=responses)
    mock_chat = MagicMock()
    mock_chat.completions = mock_completions
    mock_client_instance = AsyncMock()
    mock_client_instance.chat = mock_chat
    return mock_client_instance, mock_completions


@pytest.mark.asyncio
async def test_llm_client_json_parsing():
    mock_client_instance, mock_completions = mock_openai('{"name": "Alice", "age": 30}')

    with patch("hackhub.ai.llm_client.AsyncOpenAI", return_value=mock_client_instance):
        with patch("hackhub.ai.llm_client.settings.LLM_API_KEY", "dummy_key"):
            client = LLMClient(model_name="test-model")

            result = await client.generate_structured(
                system_prompt="You are a helpful assistant.",
                user_prompt="Give me Alice's details",
                response_schema=DummyModel,
            )

            assert isinstance(result, DummyModel)
            assert result.name == "Alice"
            assert result.age == 30
            mock_completions.create.assert_called_once()


@pytest.mark.asyncio
async def test_llm_client_retries_unparseable_output():
    mock_client_instance, mock_completions = mock_openai(
        "Sure! Here you go.",
        'Here is the JSON:\n```json\n{"name": "Bob", "age": 41}\n```',
    )

    with patch("hackhub.ai.llm_client.AsyncOpenAI", return_value=mock_client_instance):
        with patch("hackhub.ai.llm_client.settings.LLM_API_KEY", "dummy_key"):
            client = LLMClient(model_name="test-model")

            result = await client.generate_structured("system", "user", DummyModel)

            assert result.name == "Bob"
            assert mock_completions.create.call_count == 2
            second_call = mock_completions.create.call_args_list[1]
            assert second_call.kwargs["temperature"] == 0


@pytest.mark.asyncio
async def test_llm_client_gives_up_after_retry():
    mock_client_instance, mock_completions = mock_openai("nope", "still nope")

    with patch("hackhub.ai.llm_client.AsyncOpenAI", return_value=mock_client_instance):
        with patch("hackhub.ai.llm_client.settings.LLM_API_KEY", "dummy_key"):
            client = LLMClient(model_name="test-model")

            with pytest.raises(ValueError, match="Unable to parse structured response"):
                await client.generate_structured("system", "user", DummyModel)
            assert mock_completions.create.call_count == 2


@pytest.mark.asyncio
async def test_generate_text_strips_fences():
    mock_client_instance, mock_completions = mock_openai("```markdown\n# Title\nBody\n```")

    with patch("hackhub.ai.llm_client.AsyncOpenAI", return_value=mock_client_instance):
        with patch("hackhub.ai.llm_client.settings.LLM_API_KEY", "dummy_key"):
            client = LLMClient(model_name="gpt-5-mini")

            text = await client.generate_text("system", "user", temperature=0.3)

            assert text == "# Title\nBody"
            assert "temperature" not in mock_completions.create.call_args.kwargs


@pytest.mark.asyncio
async def test_generate_text_rejects_empty_output():
    mock_client_instance, _ = mock_openai("   ")

    with patch("hackhub.ai.llm_client.AsyncOpenAI", return_value=mock_client_instance):
        with patch("hackhub.ai.llm_client.settings.LLM_API_KEY", "dummy_key"):
            client = LLMClient(model_name="test-model")

            with pytest.raises(EmptyCompletionError):
                await client.generate_text("system", "user")


def test_llm_client_requires_key():
    with patch("hackhub.ai.llm_client.settings.LLM_API_KEY", None):
        with pytest.raises(LLMNotConfiguredError):
            LLMClient(model_name="test-model")


def test_json_candidates_handles_prefixes():
    assert json_candidates('json: {"a": 1}')[-1] == '{"a": 1}'
    assert json_candidates('noise [1, 2] trailing') == ['noise [1, 2] trailing', '[1, 2]']
    assert json_candidates("") == []
    assert strip_code_fences("plain") == "plain"
