"""Interactive terminal UI for codebuddy."""
