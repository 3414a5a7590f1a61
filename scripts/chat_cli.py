#!/usr/bin/env python3
"""Interactive chat CLI for the streaming agent endpoints."""

import json
import sys

import httpx
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Prompt

AGENT_PATHS = {
    "travel": "/api/travel/agent",
    "learning": "/api/learning/agent",
}


class ChatCLI:
    """Interactive chat interface that renders ND-JSON agent events as they arrive."""

    def __init__(self, base_url: str = "http://localhost:8000", agent: str = "travel"):
        self.base_url = base_url
        self.agent = agent
        self.thread_id: str | None = None
        self.console = Console()
        self.client = httpx.Client(timeout=httpx.Timeout(10.0, read=120.0))

    def start(self) -> None:
        """Start the interactive chat session."""
        self.console.print(
            Panel.fit(
                "[bold blue]🧭 Agent Lab - Interactive Chat[/bold blue]\n"
                "Type your messages to chat with the agent.\n"
                "Commands: /help, /clear, /agent travel|learning, /quit",
                border_style="blue",
            )
        )

        if not self._test_connection():
            self.console.print(f"[red]❌ Cannot connect to the service at {self.base_url}.[/red]")
            return

        self.console.print(f"[green]✅ Connected, using the {self.agent} agent[/green]\n")

        try:
            while True:
                user_input = Prompt.ask("\n[bold cyan]You[/bold cyan]")
                command = user_input.strip().lower()

                if command in ["/quit", "/exit", "quit", "exit"]:
                    break
                elif command == "/help":
                    self._show_help()
                    continue
                elif command == "/clear":
                    self.thread_id = None
                    self.console.print("[yellow]🔄 Thread cleared[/yellow]")
                    continue
                elif command.startswith("/agent"):
                    self._switch_agent(command.removeprefix("/agent").strip())
                    continue
                elif command == "":
                    continue

                self._run_agent(user_input)

        except KeyboardInterrupt:
            pass
        finally:
            self.console.print("\n[yellow]👋 Goodbye![/yellow]")
            self.client.close()

    def _test_connection(self) -> bool:
        try:
            response = self.client.get(f"{self.base_url}/health")
            return response.status_code == 200
        except httpx.HTTPError:
            return False

    def _switch_agent(self, agent: str) -> None:
        if agent not in AGENT_PATHS:
            self.console.print(f"[red]Unknown agent '{agent}'. Choose from: {', '.join(AGENT_PATHS)}[/red]")
            return
        self.agent = agent
        self.thread_id = None
        self.console.print(f"[yellow]🔄 Switched to the {agent} agent with a new thread[/yellow]")

    def _run_agent(self, message: str) -> None:
        """Send a message and render the event stream until the run ends."""
        payload: dict = {"input": message}
        if self.thread_id:
            payload["threadId"] = self.thread_id

        try:
            with self.client.stream("POST", f"{self.base_url}{AGENT_PATHS[self.agent]}", json=payload) as response:
                if response.status_code != 200:
                    response.read()
                    self.console.print(f"[red]❌ API Error: {response.status_code} - {response.text}[/red]")
                    return

                self.thread_id = response.headers.get("X-Thread-Id", self.thread_id)
                for line in response.iter_lines():
                    if line.strip():
                        self._handle_event(json.loads(line))

        except httpx.HTTPError as e:
            self.console.print(f"\n[red]❌ Connection error: {e}[/red]")

    def _handle_event(self, event: dict) -> None:
        mode, chunk = event.get("mode"), event.get("chunk") or {}

        if mode == "messages":
            self.console.print(chunk.get("content", ""), end="", markup=False, highlight=False)
        elif mode == "custom":
            self.console.print(f"\n[dim]ℹ️  {json.dumps(chunk, ensure_ascii=False)}[/dim]")
        elif mode == "updates":
            self._handle_update(chunk)

    def _handle_update(self, update: dict) -> None:
        state = update.get("state")

        if state == "tools_requested":
            names = ", ".join(tool_call["name"] for tool_call in update.get("tool_calls", []))
            self.console.print(f"\n[magenta]🔧 Calling tools: {names}[/magenta]")
        elif update.get("node") == "tools" and "tool_call_id" in update:
            color = "red" if update.get("status") == "error" else "dim"
            self.console.print(f"[{color}]   ↳ {update['name']}: {update.get('content', '')}[/{color}]")
        elif state == "complete":
            self.console.print()
            self.console.print(
                Panel(
                    Markdown(update.get("answer") or "No response"),
                    title=f"[bold green]🤖 {self.agent.title()} Agent[/bold green]",
                    border_style="green",
                    padding=(1, 2),
                )
            )
        elif state == "failed":
            error = update.get("error", {})
            self.console.print(f"\n[red]❌ {error.get('type')}: {error.get('message')}[/red]")

    def _show_help(self) -> None:
        help_text = """
[bold]Available Commands:[/bold]
• /help - Show this help message
• /clear - Start a new thread
• /agent travel|learning - Switch agent (starts a new thread)
• /quit or /exit - Exit the chat

[bold]Travel examples:[/bold]
1. "What's the weather in Tokyo this week?"
2. "Find hotels in Bangkok and convert 100 USD to CNY"
3. "Plan 3 days in Osaka for 4000 CNY"

[bold]Learning examples:[/bold]
1. "What is 123 multiplied by 456?"
2. "What's the weather in Beijing?"
3. "Search the knowledge base for LangGraph"
        """

        self.console.print(Panel(help_text.strip(), title="[cyan]❓ Help[/cyan]", border_style="cyan"))


def main():
    """Main entry point for the chat CLI."""
    base_url = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8000"
    agent = sys.argv[2] if len(sys.argv) > 2 else "travel"

    chat = ChatCLI(base_url, agent if agent in AGENT_PATHS else "travel")
    chat.start()


if __name__ == "__main__":
    main()
