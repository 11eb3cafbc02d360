"""CLI entry point and argument parsing"""

import argparse
import asyncio
import logging
import sys

from rich.console import Console
from rich.table import Table

import settings
from cli.status_display import show_token_status
from models import list_models
from providers import CodexProvider
from proxy import ProxyServer


console = Console()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="ChatGPT Codex Proxy CLI")
    parser.add_argument("--debug", "-d", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("login", help="Log in with your ChatGPT account")
    subparsers.add_parser("logout", help="Remove stored tokens")
    subparsers.add_parser("status", help="Show token status")
    subparsers.add_parser("models", help="List available model variants")

    serve = subparsers.add_parser("serve", help="Run the OpenAI-compatible proxy server")
    serve.add_argument("--bind", "-b", default=None, help="Override bind address (default: from config)")
    serve.add_argument("--port", "-p", type=int, default=None, help="Override port (default: from config)")

    return parser


async def login(provider: CodexProvider) -> bool:
    await provider.initialize()
    console.print("[cyan]Opening browser for ChatGPT login...[/cyan]")
    result = await provider.authenticate()
    if result.success:
        console.print("[green]✓ Logged in[/green]")
        return True
    console.print(f"[red]Login failed:[/red] {result.error}")
    return False


async def logout(provider: CodexProvider) -> None:
    await provider.initialize()
    await provider.logout()
    console.print("[green]✓ Tokens removed[/green]")


async def status(provider: CodexProvider) -> None:
    await provider.initialize()
    show_token_status(provider.token_store.get_tokens(), settings.TOKEN_FILE, console)


def show_models() -> None:
    table = Table(title="Codex Models")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Base Model")
    table.add_column("Reasoning")
    table.add_column("Context", justify="right")

    for model in list_models():
        table.add_row(
            model.id,
            model.name,
            model.base_model,
            model.reasoning_effort,
            f"{model.context_window:,}",
        )

    console.print(table)


def main(argv=None):
    """Entry point for the CLI"""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    try:
        if args.command == "models":
            show_models()
        elif args.command == "serve":
            ProxyServer(debug=args.debug, bind_address=args.bind, port=args.port).run()
        else:
            provider = CodexProvider.from_settings()
            if args.command == "login":
                if not asyncio.run(login(provider)):
                    sys.exit(1)
            elif args.command == "logout":
                asyncio.run(logout(provider))
            elif args.command == "status":
                asyncio.run(status(provider))

    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        console.print("Goodbye!")


if __name__ == "__main__":
    main()
