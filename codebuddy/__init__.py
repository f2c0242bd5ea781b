"""codebuddy: ask Gemini about the code you are looking at."""

__version__ = "0.3.0"
