# =========================================================
# SECTION DEFINITIONS
# =========================================================

# Order matters: headings are matched first-match in this order.
SECTION_LABELS = [
    "RESULT",
    "COMPATIBILITY",
    "OVERVIEW",
    "SKILL LEVEL REQUIRED",
    "HOW TO",
    "TIPS",
    "RELATED PRODUCTS"
]

FALLBACK_LABEL = "OVERVIEW"

PROSE_LABELS = ["RESULT", "COMPATIBILITY", "OVERVIEW", "SKILL LEVEL REQUIRED"]
STEP_LABELS = ["HOW TO", "STEPS"]
LIST_LABELS = ["TIPS", "RELATED PRODUCTS", "TOOLS"]

# Cards shown below the banner. TOOLS and STEPS are both cut from HOW TO.
DISPLAY_ORDER = [
    "OVERVIEW",
    "COMPATIBILITY",
    "SKILL LEVEL REQUIRED",
    "TOOLS",
    "STEPS",
    "TIPS",
    "RELATED PRODUCTS"
]

# =========================================================
# FALLBACK CONTENT
# =========================================================

NOT_PROVIDED = "Not provided."

DEFAULT_TOOLS = ["Gloves", "Rag", "Light source"]

DEFAULT_TIPS = [
    "Compare the old and new part side by side before installing.",
    "Check seals, threads and mounting points for damage or debris.",
    "Follow the torque specifications from the vehicle manufacturer."
]

DEFAULT_RELATED_PRODUCTS = [
    "Replacement gaskets or seals for the same vehicle",
    "Matching fluids or hardware recommended by the manufacturer"
]

# Below this many entries the whole default list is used instead.
MIN_LIST_ENTRIES = {
    "TIPS": 2,
    "RELATED PRODUCTS": 1,
    "TOOLS": 1
}

LIST_DEFAULTS = {
    "TIPS": DEFAULT_TIPS,
    "RELATED PRODUCTS": DEFAULT_RELATED_PRODUCTS,
    "TOOLS": DEFAULT_TOOLS
}

# =========================================================
# STATUS BANNER
# =========================================================

STATUS_ICONS = {
    "ok": "✅",
    "warn": "⚠️",
    "fail": "❌"
}

STATUS_OPTIONS = "✅ Compatible | ⚠️ Check fitment | ❌ Not compatible"
