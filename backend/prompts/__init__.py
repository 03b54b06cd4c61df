from .constants import (
    SECTION_LABELS,
    FALLBACK_LABEL,
    PROSE_LABELS,
    STEP_LABELS,
    LIST_LABELS,
    DISPLAY_ORDER,
    NOT_PROVIDED,
    DEFAULT_TOOLS,
    DEFAULT_TIPS,
    DEFAULT_RELATED_PRODUCTS,
    MIN_LIST_ENTRIES,
    LIST_DEFAULTS,
    STATUS_ICONS
)
from .templates import SECTION_GUIDANCE, USER_PROMPT_PREFIX
from .builders import (
    build_system_prompt,
    build_vehicle_details,
    build_user_prompt,
    build_ollama_payload,
    build_openai_messages
)

__all__ = [
    "SECTION_LABELS",
    "FALLBACK_LABEL",
    "PROSE_LABELS",
    "STEP_LABELS",
    "LIST_LABELS",
    "DISPLAY_ORDER",
    "NOT_PROVIDED",
    "DEFAULT_TOOLS",
    "DEFAULT_TIPS",
    "DEFAULT_RELATED_PRODUCTS",
    "MIN_LIST_ENTRIES",
    "LIST_DEFAULTS",
    "STATUS_ICONS",
    "SECTION_GUIDANCE",
    "USER_PROMPT_PREFIX",
    "build_system_prompt",
    "build_vehicle_details",
    "build_user_prompt",
    "build_ollama_payload",
    "build_openai_messages"
]
