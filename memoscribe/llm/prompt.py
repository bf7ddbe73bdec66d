"""
memoscribe.llm.prompt - Prompt assembly.

The configured prompt is either a Jinja2 template referencing
{{ transcript }}, or plain text the transcript is appended to.
"""

from __future__ import annotations

from jinja2 import Environment, TemplateSyntaxError, meta

from memoscribe.exceptions import GenerationError

_env = Environment(autoescape=False, keep_trailing_newline=True)


def template_variables(template: str) -> set[str]:
    """Names of the undeclared variables a template references."""
    try:
        return meta.find_undeclared_variables(_env.parse(template))
    except TemplateSyntaxError as e:
        raise GenerationError(f"Invalid prompt template: {e}") from e


def build_prompt(template: str, transcript: str) -> str:
    """Combine the prompt template with a transcript.

    Args:
        template: Configured prompt (plain text or Jinja2 template)
        transcript: Full transcript text

    Returns:
        Prompt string, terminated with a period

    Raises:
        GenerationError: If the template or transcript is empty
    """
    if not transcript.strip():
        raise GenerationError("Cannot find prompt.")

    if "transcript" in template_variables(template):
        prompt = _env.from_string(template).render(transcript=transcript)
    else:
        prompt = template + transcript

    if not prompt.strip():
        raise GenerationError("Cannot find prompt.")
    return prompt + "."
