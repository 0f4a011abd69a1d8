"""Default prompt texts and the labels used to stitch Vision and Reasoning stage text together."""

DEFAULT_VISION_PROMPT = (
    "Describe this game screenshot in detail. Transcribe any visible text (OCR), identify "
    "interface elements (buttons, menus, numbers, characters, quests, maps, combat or "
    "management screens), infer the game genre and core gameplay cues, guess the platform "
    "(mobile, PC or console), and note the art style and camera perspective. If level, event "
    "or payment information appears, call it out explicitly."
)

DEFAULT_THINKING_PROMPT = (
    "You are a senior game analyst and product researcher. You judge a game's genre, "
    "mechanics, target audience and market positioning from screenshots and give structured "
    "conclusions.\n\n"
    "Your task: using the screenshot descriptions below (extracted by a vision model), write a "
    "multi-dimensional analysis of the game.\n\n"
    "Dimensions:\n"
    "1. Basics: likely genre, theme/setting, platform, core gameplay loop.\n"
    "2. Interface signals: UI structure, key buttons and numbers, and the design intent behind "
    "quest, level, currency and event prompts.\n"
    "3. Experience: pacing, difficulty, PvE/PvP, social/guild, progression and collection.\n"
    "4. Monetization: in-app purchases, bundles, stamina, gacha, subscriptions.\n"
    "5. Market comparison: the likely reference game and 3-5 similar titles with what they share.\n\n"
    "Output requirements:\n"
    "1. Clear structure using headings or lists.\n"
    "2. Concrete conclusions that cite what is visible in the screenshots.\n"
    "3. Professional, concise and actionable tone."
)

# Used when a configured or per-request prompt is blank.
FALLBACK_VISION_PROMPT = "Describe the screenshot."
FALLBACK_THINKING_PROMPT = "Give an analysis of the game."

VISION_SUMMARY_HEADER = "Vision analysis of the game screenshots:"
BATCHED_LABEL_INSTRUCTION = (
    "Describe each screenshot in order, labeled [Screenshot 1], [Screenshot 2], ..."
)
NO_VISION_RESULT = "No description returned"
NO_BATCHED_VISION_RESULT = "No vision description returned."
NO_REASONING_RESULT = "The model returned no output; check the model response."


def screenshot_label(index: int) -> str:
    """Label for the 1-based screenshot index."""
    return f"[Screenshot {index}]"


def indexed_vision_prompt(prompt: str, index: int) -> str:
    """Vision prompt annotated with the 1-based index of the single image it accompanies."""
    return f"{prompt or FALLBACK_VISION_PROMPT}\n(Screenshot {index})"


def batched_vision_prompt(prompt: str) -> str:
    return f"{prompt or FALLBACK_VISION_PROMPT}\n{BATCHED_LABEL_INSTRUCTION}"


def reasoning_input(prompt: str, vision_summary: str) -> str:
    """Full text of the Reasoning stage input: prompt, header, then the combined vision text."""
    return f"{prompt or FALLBACK_THINKING_PROMPT}\n\n{VISION_SUMMARY_HEADER}\n{vision_summary}"
