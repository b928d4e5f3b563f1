"""
Centralized console configuration for skill-ninja.

- console: main console for command output
- error_console: application errors (writes to stderr)
- log_console: log records (writes to stderr)
"""

from rich.console import Console

# Main console for general output
console = Console(color_system="auto")

# Error console for application errors
error_console = Console(
    stderr=True,
    style="bold red",
)

# Log records go to stderr without the error styling
log_console = Console(stderr=True)
