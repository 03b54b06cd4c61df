from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
import requests

from fitment_analyzer import (
    BackendUnavailableError,
    FitmentAnalyzer,
    FitmentAnalyzerError,
    ModelResponseError,
    mask_key,
    normalize_ollama_model,
)

DETAILS = "Year: 2015\nMake: Honda\nModel: Civic\nNotes: oil filter"


def _response(status_code=200, payload=None, text=""):
    r = MagicMock()
    r.status_code = status_code
    r.text = text
    r.json.return_value = payload or {}
    return r


def test_normalize_ollama_model():
    assert normalize_ollama_model("llava") == "llava:latest"
    assert normalize_ollama_model("llava:13b") == "llava:13b"
    assert normalize_ollama_model(None) == "llava:latest"


def test_mask_key():
    assert mask_key("sk-1234567890abcd") == "sk-1...abcd"
    assert mask_key("short") == "***"
    assert mask_key(None) == ""


def test_ollama_analyse_posts_chat_payload():
    reply = {
        "message": {"content": "  RESULT: ✅ Compatible\nOVERVIEW: Oil filter  "},
        "prompt_eval_count": 10,
        "eval_count": 5,
    }
    with patch("fitment_analyzer.requests.post", return_value=_response(payload=reply)) as mock_post:
        analyzer = FitmentAnalyzer(provider="ollama", model_name="llava", base_url="http://ollama:11434/")
        res = analyzer.analyse("aW1hZ2U=", DETAILS)

    url = mock_post.call_args.args[0]
    payload = mock_post.call_args.kwargs["json"]
    assert url == "http://ollama:11434/api/chat"
    assert payload["model"] == "llava:latest"
    assert payload["stream"] is False
    assert payload["options"] == {"num_predict": 512, "temperature": 0.2}
    assert payload["messages"][1]["images"] == ["aW1hZ2U="]
    assert DETAILS in payload["messages"][1]["content"]

    assert res["content"] == "RESULT: ✅ Compatible\nOVERVIEW: Oil filter"
    assert res["usage"]["total_tokens"] == 15
    assert res["provider"] == "Ollama"
    assert res["duration_ms"] >= 0


def test_ollama_unreachable_raises_backend_unavailable():
    with patch("fitment_analyzer.requests.post", side_effect=requests.exceptions.ConnectionError("refused")):
        analyzer = FitmentAnalyzer(provider="ollama")
        with pytest.raises(BackendUnavailableError):
            analyzer.analyse("aW1hZ2U=", DETAILS)


def test_ollama_error_response_includes_backend_message():
    bad = _response(status_code=404, payload={"error": "model 'llava:latest' not found"}, text="not found")
    with patch("fitment_analyzer.requests.post", return_value=bad):
        analyzer = FitmentAnalyzer(provider="ollama")
        with pytest.raises(ModelResponseError) as exc:
            analyzer.analyse("aW1hZ2U=", DETAILS)
    assert "model 'llava:latest' not found" in str(exc.value)


def test_ollama_missing_message_gives_empty_content():
    with patch("fitment_analyzer.requests.post", return_value=_response(payload={})):
        res = FitmentAnalyzer(provider="ollama").analyse("aW1hZ2U=", DETAILS)
    assert res["content"] == ""


def test_openai_without_key_is_rejected():
    analyzer = FitmentAnalyzer(provider="openai")
    assert analyzer.client is None
    with pytest.raises(FitmentAnalyzerError):
        analyzer.analyse("aW1hZ2U=", DETAILS)


def test_openai_analyse_sends_image_as_data_uri():
    completion = SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=" RESULT: ⚠️ Check fitment "))],
        usage=SimpleNamespace(prompt_tokens=3, completion_tokens=4, total_tokens=7),
    )
    with patch("fitment_analyzer.OpenAI") as mock_openai:
        client = mock_openai.return_value
        client.chat.completions.create.return_value = completion
        analyzer = FitmentAnalyzer(api_key="sk-test-key-123456", provider="OpenAI", organization="org-1")
        res = analyzer.analyse("aW1hZ2U=", DETAILS)

    assert mock_openai.call_args.kwargs["organization"] == "org-1"
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gpt-4o-mini"
    assert kwargs["max_tokens"] == 512
    user_content = kwargs["messages"][1]["content"]
    assert user_content[1]["image_url"]["url"] == "data:image/jpeg;base64,aW1hZ2U="
    assert res["content"] == "RESULT: ⚠️ Check fitment"
    assert res["usage"]["total_tokens"] == 7
    assert res["provider"] == "OpenAI"


def test_list_models_ollama_sorted():
    tags = {"models": [{"name": "llava:latest"}, {"name": "bakllava:latest"}]}
    with patch("fitment_analyzer.requests.get", return_value=_response(payload=tags)):
        models = FitmentAnalyzer(provider="ollama").list_models()
    assert models == ["bakllava:latest", "llava:latest"]


def test_list_models_ollama_unreachable():
    with patch("fitment_analyzer.requests.get", side_effect=requests.exceptions.ConnectionError("refused")):
        with pytest.raises(BackendUnavailableError):
            FitmentAnalyzer(provider="ollama").list_models()
