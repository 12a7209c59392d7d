from unittest.mock import MagicMock, patch

from mock_rest.llm import DEFAULT_MODEL, LlmClient


def _response(content):
    mock_resp = MagicMock()
    mock_resp.choices = [MagicMock()]
    mock_resp.choices[0].message.content = content
    return mock_resp


class TestLlmClient:
    def test_default_model(self):
        assert LlmClient().model == DEFAULT_MODEL

    def test_custom_model(self):
        assert LlmClient(model="gpt-4o").model == "gpt-4o"

    @patch("mock_rest.llm.completion")
    def test_call_returns_content(self, mock_completion):
        mock_completion.return_value = _response("test response")
        result = LlmClient(model="gpt-4o").call(system="You are helpful.", user="Hello")
        assert result == "test response"
        mock_completion.assert_called_once()

    @patch("mock_rest.llm.completion")
    def test_call_passes_model_and_messages(self, mock_completion):
        mock_completion.return_value = _response("ok")
        LlmClient(model="gpt-4o").call(system="sys", user="usr")

        call_kwargs = mock_completion.call_args[1]
        assert call_kwargs["model"] == "gpt-4o"
        assert call_kwargs["temperature"] == 0.0
        assert "response_format" not in call_kwargs
        messages = call_kwargs["messages"]
        assert messages[0] == {"role": "system", "content": "sys"}
        assert messages[1] == {"role": "user", "content": "usr"}

    @patch("mock_rest.llm.completion")
    def test_json_mode(self, mock_completion):
        mock_completion.return_value = _response("{}")
        LlmClient().call(system="sys", user="usr", json_mode=True)
        assert mock_completion.call_args[1]["response_format"] == {"type": "json_object"}

    @patch("mock_rest.llm.completion")
    def test_empty_content(self, mock_completion):
        mock_completion.return_value = _response(None)
        assert LlmClient().call(system="sys", user="usr") == ""
