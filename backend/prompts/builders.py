from typing import Dict, List, Optional

from .constants import SECTION_LABELS
from .templates import (
    SECTION_GUIDANCE,
    SYSTEM_PROMPT_HEADER,
    SYSTEM_PROMPT_FOOTER,
    USER_PROMPT_PREFIX
)

# =========================================================
# PROMPT BUILDERS
# =========================================================

def build_system_prompt(labels: Optional[List[str]] = None) -> str:
    """One `LABEL: guidance` line per heading, in the order the parser expects them."""
    labels = labels or SECTION_LABELS
    lines = [SYSTEM_PROMPT_HEADER]
    for label in labels:
        lines.append(f"{label}: {SECTION_GUIDANCE.get(label, 'Short, specific content.')}")
    lines.append(SYSTEM_PROMPT_FOOTER)
    return "\n".join(lines)


def build_vehicle_details(year: str, make: str, model: str,
                          product_url: str = "", notes: str = "") -> str:
    details = [
        f"Year: {year or 'Unknown'}",
        f"Make: {make or 'Unknown'}",
        f"Model: {model or 'Unknown'}",
        f"Product URL: {product_url}" if product_url else "",
        f"Notes: {notes}" if notes else "",
    ]
    return "\n".join(d for d in details if d)


def build_user_prompt(details: str) -> str:
    return f"{USER_PROMPT_PREFIX}\n{details}"


def build_ollama_payload(model: str, details: str, image_b64: str,
                         num_predict: int = 512, temperature: float = 0.2) -> Dict:
    return {
        "model": model,
        "messages": [
            {"role": "system", "content": build_system_prompt()},
            {
                "role": "user",
                "content": build_user_prompt(details),
                "images": [image_b64],
            },
        ],
        "options": {
            "num_predict": num_predict,
            "temperature": temperature,
        },
        "stream": False,
    }


def build_openai_messages(details: str, image_b64: str) -> List[Dict]:
    user_content = [
        {"type": "text", "text": build_user_prompt(details)},
        {
            "type": "image_url",
            "image_url": {"url": f"data:image/jpeg;base64,{image_b64}"},
        },
    ]
    return [
        {"role": "system", "content": build_system_prompt()},
        {"role": "user", "content": user_content},
    ]
