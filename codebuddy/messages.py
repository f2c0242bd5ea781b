"""Typed messages exchanged between the conversation controller and its view.

Every message is a plain JSON-serializable dict tagged by "command".
"""

SUBMIT_PROMPT = "submitPrompt"
APPLY_CODE = "applyCode"
SHOW_LOADING = "showLoading"
ADD_RESPONSE = "addResponse"
EXECUTE_PROMPT = "executePrompt"

# view -> controller
INBOUND_SCHEMA = {
    SUBMIT_PROMPT: ("prompt",),
    APPLY_CODE: ("code",),
}

# controller -> view
OUTBOUND_SCHEMA = {
    SHOW_LOADING: (),
    ADD_RESPONSE: ("response",),
    EXECUTE_PROMPT: ("prompt",),
}

FALLBACK_RESPONSE = "Sorry, an error occurred."


def submit_prompt(prompt: str) -> dict:
    return {"command": SUBMIT_PROMPT, "prompt": prompt}


def apply_code(code: str) -> dict:
    return {"command": APPLY_CODE, "code": code}


def show_loading() -> dict:
    return {"command": SHOW_LOADING}


def add_response(response: str) -> dict:
    return {"command": ADD_RESPONSE, "response": response}


def execute_prompt(prompt: str) -> dict:
    return {"command": EXECUTE_PROMPT, "prompt": prompt}


def validate_message(message, inbound: bool) -> dict:
    """Check a message against the schema for its direction.

    Raises ValueError on an unknown tag or a missing/non-string payload.
    """
    schema = INBOUND_SCHEMA if inbound else OUTBOUND_SCHEMA
    if not isinstance(message, dict):
        raise ValueError(f"Message must be an object, got {type(message).__name__}")

    command = message.get("command")
    if command not in schema:
        direction = "inbound" if inbound else "outbound"
        raise ValueError(f"Unknown {direction} command: {command!r}")

    for field_name in schema[command]:
        if not isinstance(message.get(field_name), str):
            raise ValueError(f"{command} requires a string '{field_name}'")
    return message
