# ABOUTME: Shared helpers for kion CLI commands
# ABOUTME: Output formatting, prompts and input validation
