from fastapi import FastAPI, HTTPException, UploadFile, File, Form
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from typing import Optional, Dict
import os
from dotenv import load_dotenv

import prompts
from config_manager import ConfigManager
from fitment_analyzer import (
    FitmentAnalyzer,
    FitmentAnalyzerError,
    BackendUnavailableError,
    ModelResponseError,
    mask_key
)
from image_processor import (
    ImageValidationError,
    ImageProcessingError,
    MAX_UPLOAD_BYTES,
    validate_upload,
    prepare_image
)
from section_parser import extract_sections, sanitize_input
from section_renderer import render_sections

load_dotenv()

app = FastAPI(title="Part Fitment Assistant API")
config_manager = ConfigManager()

# Enable CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

PROVIDERS = ("ollama", "openai")


class ConfigRequest(BaseModel):
    provider: Optional[str] = None
    ollama_base_url: Optional[str] = None
    ollama_model: Optional[str] = None
    openai_key: Optional[str] = None
    openai_model: Optional[str] = None
    openai_org: Optional[str] = None


class ParseRequest(BaseModel):
    text: str


def build_analyzer(config: Dict, provider: Optional[str] = None,
                   api_key: Optional[str] = None, base_url: Optional[str] = None) -> FitmentAnalyzer:
    provider = (provider or config.get("provider") or "ollama").lower()
    if provider == "openai":
        return FitmentAnalyzer(
            api_key=api_key or config.get("openai_key"),
            model_name=config.get("openai_model"),
            provider="OpenAI",
            organization=config.get("openai_org")
        )
    return FitmentAnalyzer(
        model_name=config.get("ollama_model"),
        provider="Ollama",
        base_url=base_url or config.get("ollama_base_url")
    )


@app.get("/")
def read_root():
    return {"message": "Part Fitment Assistant Backend is Running"}


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/api/config")
def get_config():
    config = config_manager.load_config()
    config["openai_key"] = mask_key(config.get("openai_key"))
    return config


@app.post("/api/config")
def update_config(req: ConfigRequest):
    current_config = config_manager.load_config()

    if req.provider is not None:
        provider = req.provider.lower()
        if provider not in PROVIDERS:
            raise HTTPException(status_code=400, detail=f"Unknown provider '{req.provider}'. Use one of: {', '.join(PROVIDERS)}.")
        current_config["provider"] = provider
    for field in ("ollama_base_url", "ollama_model", "openai_key", "openai_model", "openai_org"):
        value = getattr(req, field)
        if value is not None:
            current_config[field] = value.strip()

    config_manager.save_config(current_config)
    response = dict(current_config)
    response["openai_key"] = mask_key(response.get("openai_key"))
    return {"status": "success", "config": response}


@app.post("/api/models")
def list_models(req: Dict):
    config = config_manager.load_config()
    provider = (req.get("provider") or config.get("provider") or "ollama").lower()
    analyzer = build_analyzer(config, provider=provider, api_key=req.get("api_key"), base_url=req.get("base_url"))
    try:
        return {"valid": True, "models": analyzer.list_models()}
    except BackendUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except ModelResponseError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except FitmentAnalyzerError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/api/parse")
def parse_text(req: ParseRequest):
    """Re-run section parsing on a saved model reply."""
    sections = extract_sections(req.text)
    return {"sections": sections, "display": render_sections(sections)}


@app.post("/api/analyse")
async def analyse_part(
    image: Optional[UploadFile] = File(None),
    year: str = Form(""),
    make: str = Form(""),
    model: str = Form(""),
    product_url: str = Form("", alias="productUrl"),
    notes: str = Form(""),
):
    if image is None:
        raise HTTPException(status_code=400, detail="Please upload an image file (max 5MB).")

    try:
        # Reject on the declared size first, then never buffer more than one byte past the limit.
        validate_upload(image.content_type, image.size or 0)
        data = await image.read(MAX_UPLOAD_BYTES + 1)
        if not data:
            raise HTTPException(status_code=400, detail="Please upload an image file (max 5MB).")
        validate_upload(image.content_type, len(data))
    except ImageValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not year.strip() or not make.strip() or not model.strip() or not notes.strip():
        raise HTTPException(status_code=400, detail="Year, make, model, and description/notes are required.")

    try:
        prepared = prepare_image(data)
    except ImageProcessingError as e:
        raise HTTPException(status_code=400, detail=str(e))

    details = prompts.build_vehicle_details(
        sanitize_input(year, 10),
        sanitize_input(make, 100),
        sanitize_input(model, 100),
        sanitize_input(product_url, 500),
        sanitize_input(notes, 1000)
    )

    config = config_manager.load_config()
    try:
        analyzer = build_analyzer(config)
        result = await analyzer.analyse_async(prepared.base64, details)
    except BackendUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except ModelResponseError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except FitmentAnalyzerError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        print(f"[ANALYSE_ERROR] Unexpected error: {e}")
        raise HTTPException(status_code=500, detail="Something went wrong while processing your request.")

    raw_text = result.get("content", "")
    if not raw_text:
        raise HTTPException(status_code=502, detail="Received an unexpected response from the model.")

    sections = extract_sections(raw_text)
    print(
        f"[TIMING] resize={prepared.duration_ms:.1f}ms (resized={prepared.resized}), "
        f"infer={result['duration_ms']:.1f}ms, provider={result['provider']}"
    )
    return {
        "rawText": raw_text,
        "sections": sections,
        "display": render_sections(sections),
        "provider": result["provider"],
        "model": result["model"],
        "usage": result.get("usage", {}),
        "timing": {
            "resize_ms": prepared.duration_ms,
            "resized": prepared.resized,
            "inference_ms": result["duration_ms"],
        },
    }


if __name__ == "__main__":
    import uvicorn
    # Get port from environment variable for cloud deployment
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("main:app", host="0.0.0.0", port=port, reload=False if os.environ.get("PORT") else True)
