"""AI provider access (Gemini / Groq through LiteLLM).

Public API:
    - AIClient: send a prompt, get raw text back
    - AIConfig: provider keys, models and timeouts
    - parse_json_object: recover a JSON object from provider output
"""

from careerbridge.ai.client import AIClient
from careerbridge.ai.config import AIConfig, get_ai_config, reset_ai_config
from careerbridge.ai.parsing import find_balanced_object, parse_json_object

__all__ = [
    "AIClient",
    "AIConfig",
    "get_ai_config",
    "reset_ai_config",
    "parse_json_object",
    "find_balanced_object",
]
