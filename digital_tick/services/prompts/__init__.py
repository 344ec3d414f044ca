"""System prompt definitions."""

from digital_tick.services.prompts.digital_home import DIGITAL_HOME_PROMPT, plan_context_prompt

__all__ = ["DIGITAL_HOME_PROMPT", "plan_context_prompt"]
