"""
Logging utilities for the index mirror.

Provides colorful CLI logging and tree rendering using the rich library.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn
from rich.tree import Tree


# Global console instance
console = Console()

# Logger instances cache
_loggers: dict = {}


def setup_logger(
    name: str = "index_mirror",
    level: int = logging.INFO,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Set up and configure a logger with rich formatting.

    Args:
        name: Logger name
        level: Logging level (default: INFO)
        log_file: Optional file path to write logs

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Clear existing handlers
    logger.handlers.clear()

    console_handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True
    )
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    # File handler if specified
    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        file_handler.setLevel(level)
        logger.addHandler(file_handler)

    _loggers[name] = logger
    return logger


def get_logger(name: str = "index_mirror") -> logging.Logger:
    """
    Get a logger instance.

    Component loggers are children of the "index_mirror" logger, so a single
    setup_logger() call configures them all.

    Args:
        name: Logger name (component name or full dotted name)

    Returns:
        Logger instance
    """
    if name not in _loggers:
        full_name = name if name.startswith("index_mirror") else f"index_mirror.{name}"
        _loggers[name] = logging.getLogger(full_name)
    return _loggers[name]


def create_progress() -> Progress:
    """
    Create a rich progress bar instance.

    Returns:
        Progress instance bound to the shared console
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console
    )


def render_tree(root, label: Optional[str] = None) -> Tree:
    """
    Build a rich Tree from a DirectoryEntry for display.

    Args:
        root: DirectoryEntry to render
        label: Label for the root node (defaults to the entry name or "/")

    Returns:
        rich Tree mirroring the entry hierarchy in child order
    """
    tree = Tree(f"[bold blue]{escape(label or root.name or '/')}[/bold blue]")
    _add_branch(tree, root)
    return tree


def _add_branch(branch: Tree, node) -> None:
    for child in node.children:
        if child.is_directory:
            _add_branch(branch.add(f"[bold]{escape(child.name)}/[/bold]"), child)
        else:
            branch.add(escape(child.name))


def print_status(message: str, style: str = "bold blue") -> None:
    """
    Print a styled status message.

    Args:
        message: Message to print
        style: Rich style string
    """
    console.print(f"[{style}]{escape(message)}[/{style}]")


def print_error(message: str) -> None:
    """Print an error message."""
    print_status(f"❌ {message}", "bold red")


def print_success(message: str) -> None:
    """Print a success message."""
    print_status(f"✅ {message}", "bold green")


def print_warning(message: str) -> None:
    """Print a warning message."""
    print_status(f"⚠️ {message}", "bold yellow")


def print_info(message: str) -> None:
    """Print an info message."""
    print_status(f"ℹ️ {message}", "bold cyan")
