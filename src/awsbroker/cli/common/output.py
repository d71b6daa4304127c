"""Output formatting utilities for the CLI."""

from __future__ import annotations

import json
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

import questionary
from rich.console import Console
from rich.table import Table
from rich.theme import Theme

from awsbroker.cli.common.tui_style import QUESTIONARY_STYLE_CONFIRM

_THEME = Theme(
    {
        "ok": "bold green",
        "warn": "yellow",
        "err": "bold red",
        "title": "bold cyan",
        "meta": "dim",
    }
)

console = Console(theme=_THEME)
err_console = Console(theme=_THEME, stderr=True)


@dataclass(frozen=True)
class Out:
    """Output formatter for CLI messages and tables."""

    def info(self, msg: str) -> None:
        console.print(f"[title]›[/] {msg}")

    @contextmanager
    def status(self, msg: str):
        """Show a transient status spinner while work is in progress."""
        with console.status(msg, spinner="dots"):
            yield

    def success(self, msg: str) -> None:
        console.print(f"[ok]✓[/] {msg}")

    def warn(self, msg: str) -> None:
        err_console.print(f"[warn]⚠[/] {msg}")

    def error(self, msg: str) -> None:
        err_console.print(f"[err]✗[/] {msg}")

    def header(self, title: str) -> None:
        console.print(f"[title]{title}[/]")

    def kv(self, items: Mapping[str, Any]) -> None:
        """Print key-value pairs."""
        for k, v in items.items():
            console.print(f"[meta]{k}[/]: {v}")

    def json(self, data: Any) -> None:
        """Print ``data`` as indented JSON."""
        console.print_json(json.dumps(data, default=str))

    def confirm(self, message: str, *, default: bool = False) -> bool:
        """
        Ask the user for confirmation.

        Returns:
            True if the user confirms, False otherwise (including Ctrl-C).
        """
        console.print("[meta]Use y/n then Enter[/]")
        answer = questionary.confirm(
            f"[awsbroker] {message}",
            default=default,
            style=QUESTIONARY_STYLE_CONFIRM,
            qmark="✦",
            auto_enter=False,
        ).ask()
        return bool(answer)

    def services_table(self, services: Iterable[Any], title: str = "Services") -> None:
        """
        Expects objects with .id .name .description .bindable .plans
        (like awsbroker.core.models.ServiceDefinition)
        """
        t = Table(title=title, show_lines=False)
        t.add_column("Name", style="ok", no_wrap=True)
        t.add_column("Service ID", no_wrap=True)
        t.add_column("Plans", justify="right")
        t.add_column("Bindable")
        t.add_column("Description", style="meta")

        for s in services:
            t.add_row(
                s.name,
                s.id,
                str(len(s.plans)),
                "yes" if s.bindable else "no",
                s.description,
            )

        console.print(t)

    def plans_table(self, plans: Iterable[Any], title: str = "Plans") -> None:
        """
        Expects objects with .id .name .free .prescribed
        (like awsbroker.core.models.ServicePlan)
        """
        t = Table(title=title, show_lines=False)
        t.add_column("Plan", style="ok", no_wrap=True)
        t.add_column("Plan ID", no_wrap=True)
        t.add_column("Free")
        t.add_column("Prescribed", style="meta")

        for p in plans:
            prescribed = ", ".join(f"{k}={v}" for k, v in (p.prescribed or {}).items())
            t.add_row(p.name, p.id, "yes" if p.free else "no", prescribed)

        console.print(t)


out = Out()
