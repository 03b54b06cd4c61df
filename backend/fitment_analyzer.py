import time
from threading import Lock
from typing import Dict, List, Optional

import anyio
import openai
import requests
from openai import OpenAI

import prompts
import section_parser


class FitmentAnalyzerError(Exception):
    """Base exception for FitmentAnalyzer errors"""
    pass


class BackendUnavailableError(FitmentAnalyzerError):
    """The inference backend could not be reached at all."""
    pass


class ModelResponseError(FitmentAnalyzerError):
    """The backend answered, but with an error or an unusable reply."""
    pass


def normalize_ollama_model(name: Optional[str]) -> str:
    name = (name or "llava").strip()
    return name if ":" in name else f"{name}:latest"


def mask_key(key: Optional[str]) -> str:
    if not key: return ""
    return f"{key[:4]}...{key[-4:]}" if len(key) > 8 else "***"


class FitmentAnalyzer:
    OPENAI_URL = "https://api.openai.com/v1"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: Optional[str] = None,
        provider: str = "Ollama",
        base_url: Optional[str] = None,
        organization: Optional[str] = None,
        timeout: int = 300,
        max_retries: int = 2,
        num_predict: int = 512,
        temperature: float = 0.2
    ):
        self.api_key = api_key.strip() if api_key else None
        self.provider = "OpenAI" if (provider or "").lower() == "openai" else "Ollama"
        if self.provider == "Ollama":
            self.model_name = normalize_ollama_model(model_name)
        else:
            self.model_name = (model_name or "gpt-4o-mini").strip()
        self.base_url = (base_url or "http://localhost:11434").rstrip("/")
        self.organization = organization or None
        self.timeout = timeout
        self.max_retries = max_retries
        self.num_predict = num_predict
        self.temperature = temperature
        self.client = None
        self._client_lock = Lock()

        self._initialize_client()

    def _initialize_client(self):
        if self.provider == "OpenAI" and self.api_key:
            print(f"[INIT] Initializing OpenAI client with key: {mask_key(self.api_key)} (model={self.model_name})")
            self.client = OpenAI(
                base_url=self.OPENAI_URL,
                api_key=self.api_key,
                organization=self.organization,
                timeout=float(self.timeout),
                max_retries=self.max_retries
            )
        elif self.provider == "Ollama":
            print(f"[INIT] Using Ollama at {self.base_url} (model={self.model_name})")

    # --- API HELPERS ---

    def _analyse_ollama(self, image_b64: str, details: str) -> Dict:
        payload = prompts.build_ollama_payload(
            self.model_name, details, image_b64,
            num_predict=self.num_predict, temperature=self.temperature
        )
        try:
            r = requests.post(f"{self.base_url}/api/chat", json=payload, timeout=self.timeout)
        except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
            print(f"[OLLAMA_ERROR] Ollama unreachable: {e}")
            raise BackendUnavailableError(
                "Ollama is not reachable. Is the container running and the model pulled?"
            ) from e

        if r.status_code != 200:
            print(f"[OLLAMA_ERROR] Error response: {r.text}")
            detail = ""
            try:
                err = r.json().get("error")
                detail = f" Ollama error: {err}" if err else ""
            except ValueError:
                pass
            raise ModelResponseError(
                f'Ollama responded with an error for model "{self.model_name}". '
                f"Ensure the model is pulled and running.{detail}"
            )

        d = r.json()
        return {
            "content": ((d.get("message") or {}).get("content") or "").strip(),
            "usage": {
                "prompt_tokens": d.get("prompt_eval_count", 0),
                "completion_tokens": d.get("eval_count", 0),
                "total_tokens": d.get("prompt_eval_count", 0) + d.get("eval_count", 0)
            }
        }

    def _analyse_openai(self, image_b64: str, details: str) -> Dict:
        if not self.client:
            raise FitmentAnalyzerError("OPENAI_API_KEY is required when PROVIDER=openai.")
        try:
            with self._client_lock:
                c = self.client.chat.completions.create(
                    model=self.model_name,
                    temperature=self.temperature,
                    max_tokens=self.num_predict,
                    messages=prompts.build_openai_messages(details, image_b64)
                )
        except openai.APIConnectionError as e:
            print(f"[OPENAI_ERROR] OpenAI unreachable: {e}")
            raise BackendUnavailableError("OpenAI API is not reachable.") from e
        except openai.APIStatusError as e:
            print(f"[OPENAI_ERROR] Error response: {e}")
            raise ModelResponseError(f'OpenAI responded with an error for model "{self.model_name}".') from e

        content = ""
        if c.choices:
            content = (c.choices[0].message.content or "").strip()
        u = c.usage
        usage = {}
        if u:
            usage = {"prompt_tokens": u.prompt_tokens, "completion_tokens": u.completion_tokens, "total_tokens": u.total_tokens}
        return {"content": content, "usage": usage}

    # --- PUBLIC METHODS ---

    def analyse(self, image_b64: str, details: str) -> Dict:
        """Send one image plus vehicle details to the backend and return the reply text."""
        print(f"[API_CALL] provider={self.provider} model={self.model_name} details={len(details)} chars")
        start = time.perf_counter()
        if self.provider == "OpenAI":
            res = self._analyse_openai(image_b64, details)
        else:
            res = self._analyse_ollama(image_b64, details)

        res["content"] = section_parser.clean_output(res["content"])
        res["duration_ms"] = round((time.perf_counter() - start) * 1000, 1)
        res["model"] = self.model_name
        res["provider"] = self.provider
        return res

    async def analyse_async(self, image_b64: str, details: str) -> Dict:
        return await anyio.to_thread.run_sync(self.analyse, image_b64, details)

    def list_models(self) -> List[str]:
        if self.provider == "OpenAI":
            if not self.client:
                raise FitmentAnalyzerError("OpenAI API Key is required")
            try:
                models = self.client.models.list()
            except openai.OpenAIError as e:
                raise ModelResponseError(f"OpenAI Error: {e}") from e
            return sorted(m.id for m in models.data)

        try:
            response = requests.get(f"{self.base_url}/api/tags", timeout=5)
        except requests.exceptions.RequestException as e:
            raise BackendUnavailableError(f"Cannot connect to Ollama: {e}") from e
        if response.status_code != 200:
            raise ModelResponseError(f"Ollama error {response.status_code}: {response.text}")
        return sorted(m["name"] for m in response.json().get("models", []))
