"""
Prompt text for codebuddy.

RELAY_PROMPT_TEMPLATE wraps the user's request and the captured code.
MARKDOWN_DIRECTIVE is always the last thing Gemini reads.
"""

MARKDOWN_DIRECTIVE = """IMPORTANT: Your response MUST be formatted using standard Markdown.
- Use lists for steps or bullet points.
- Use **bold** for emphasis.
- Use inline `code` for variable names or short snippets."""

RELAY_PROMPT_TEMPLATE = """Based on the following code context, please handle this request: "{user_prompt}"

--- CODE CONTEXT ---
{code_context}
--- END CODE CONTEXT ---

"""


def build_relay_prompt(user_prompt: str, code_context: str) -> str:
    """Compose the single prompt sent to Gemini.

    Both inputs are embedded verbatim. Nothing is escaped; the renderer is
    responsible for displaying the answer safely.
    """
    return (
        RELAY_PROMPT_TEMPLATE.format(
            user_prompt=user_prompt,
            code_context=code_context,
        )
        + MARKDOWN_DIRECTIVE
    )
