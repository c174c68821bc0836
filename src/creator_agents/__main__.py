"""CLI entry point for creator-agents."""

from __future__ import annotations

import argparse
import asyncio
import sys

from pydantic import ValidationError

from creator_agents.agents.registry import AgentRegistry
from creator_agents.app import CreatorAgentsApp
from creator_agents.config import AppConfig, load_config
from creator_agents.core.models import AgentSettings, ChatMessage, User
from creator_agents.core.team import AgentTeam
from creator_agents.core.types import Role
from creator_agents.errors import EntitlementError, UnknownModelError
from creator_agents.log import setup_logging

HELP_TEXT = """Commands:
  /agents              list agents
  /switch <agent_id>   talk to another agent
  /do <n>              activate suggestion n from the last reply
  /clear               clear this conversation
  /settings [model] [temperature]
  /quit"""


def _add_config_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-c", "--config", default="config.yaml", help="Path to config file")
    parser.add_argument("-e", "--env", default=".env", help="Path to .env file")


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="creator-agents",
        description="Chat with a team of AI agents for content creators",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    chat_parser = subparsers.add_parser("chat", help="Start an interactive chat")
    _add_config_args(chat_parser)
    chat_parser.add_argument("-a", "--agent", default="visionary", help="Agent to start with")

    subparsers.add_parser("agents", help="List available agents")

    activity_parser = subparsers.add_parser("activity", help="Show recent activity")
    _add_config_args(activity_parser)
    activity_parser.add_argument("-n", "--limit", type=int, default=20)

    check_parser = subparsers.add_parser("config-check", help="Validate configuration")
    _add_config_args(check_parser)

    args = parser.parse_args()

    if args.command is None:
        args.command = "chat"
        args.config = "config.yaml"
        args.env = ".env"
        args.agent = "visionary"

    if args.command == "agents":
        _list_agents()
    elif args.command == "config-check":
        _check_config(args.config, args.env)
    elif args.command == "activity":
        asyncio.run(_show_activity(_load_or_exit(args.config, args.env), args.limit))
    elif args.command == "chat":
        config = _load_or_exit(args.config, args.env)
        setup_logging(config.log_level, json_output=config.log_json)
        asyncio.run(_chat(config, args.agent))


def _load_or_exit(config_path: str, env_path: str) -> AppConfig:
    try:
        return load_config(config_path, env_path)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        print("Copy config.example.yaml to config.yaml and fill in your API key.")
        sys.exit(1)
    except Exception as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)


def _list_agents() -> None:
    for agent in AgentRegistry().list_agents():
        print(f"{agent.id:<14}{agent.name}")
        print(f"{'':<14}{agent.description}")
        if agent.tools:
            print(f"{'':<14}Tools: {', '.join(agent.tools)}")
        if agent.integrations:
            print(f"{'':<14}Integrations: {', '.join(agent.integrations)}")
        print()


def _check_config(config_path: str, env_path: str) -> None:
    """Validate configuration and print summary."""
    config = _load_or_exit(config_path, env_path)
    print(f"Configuration valid: {config_path}")
    print(f"  User: {config.user.id} ({config.user.plan} plan)")
    print(f"  Backend: {'anthropic' if config.anthropic else '(not configured)'}")
    print(f"  Models: default={config.models.default} pro={config.models.pro}")
    print(f"  Max tool rounds: {config.orchestrator.max_tool_rounds}")
    print(f"  Storage: {config.storage.db_path}")


async def _show_activity(config: AppConfig, limit: int) -> None:
    from creator_agents.storage.activity_repo import ActivityLog
    from creator_agents.storage.database import Database

    db = Database(config.storage.db_path)
    await db.initialize()
    try:
        entries = await ActivityLog(db).recent(limit)
    finally:
        await db.close()
    if not entries:
        print("No activity yet.")
    for entry in entries:
        print(f"{entry.created_at:%Y-%m-%d %H:%M}  {entry.user_id}  {entry.summary}")


def _print_message(team: AgentTeam, message: ChatMessage) -> None:
    parsed = team.render(message)
    if message.role == Role.USER:
        print(f"you> {parsed.display_text}")
    elif message.role == Role.TOOL:
        print(f"  [{parsed.display_text}]")
    else:
        agent = team.active_agent
        print(f"{agent.name if agent else 'agent'}> {parsed.display_text}")
        for n, affordance in enumerate(parsed.affordances, start=1):
            print(f"  ({n}) {affordance.label}")


async def _chat(config: AppConfig, agent_id: str) -> None:
    try:
        app = CreatorAgentsApp(config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    await app.start()
    user = User(id=config.user.id, name=config.user.name, plan=config.user.plan)
    team = app.team_for(user)
    loop = asyncio.get_running_loop()

    try:
        if await team.switch(agent_id) is None:
            print(f"Unknown agent '{agent_id}'. Try: {', '.join(app.agent_registry.ids())}")
            return
        _show_conversation(team)
        print(HELP_TEXT)

        while True:
            try:
                line = await loop.run_in_executor(None, input, "> ")
            except (EOFError, KeyboardInterrupt):
                break
            line = line.strip()
            if not line:
                continue
            if line == "/quit":
                break
            if line.startswith("/"):
                await _run_command(team, line)
                continue

            before = len(team.active.transcript)
            await team.submit(line)
            for message in team.active.transcript[before + 1:]:
                _print_message(team, message)
    finally:
        await app.stop()


def _show_conversation(team: AgentTeam) -> None:
    agent = team.active_agent
    print(f"--- {agent.name}: {agent.description}")
    for message in team.active.transcript:
        _print_message(team, message)
    if len(team.active.transcript) == 1 and agent.starter_prompts:
        print("Try: " + " | ".join(agent.starter_prompts))


async def _run_command(team: AgentTeam, line: str) -> None:
    name, _, rest = line.partition(" ")
    rest = rest.strip()

    if name == "/agents":
        for agent in team.registry.list_agents():
            marker = "*" if team.active_agent and agent.id == team.active_agent.id else " "
            print(f" {marker} {agent.id:<14}{agent.name}")
    elif name == "/switch":
        if await team.switch(rest) is None:
            print(f"Unknown agent '{rest}'.")
        else:
            _show_conversation(team)
    elif name == "/do":
        affordances = team.last_affordances()
        if not rest.isdigit() or not 1 <= int(rest) <= len(affordances):
            print("Nothing to do with that number.")
            return
        before_agent = team.active_agent
        before = len(team.active.transcript)
        print(await team.activate(affordances[int(rest) - 1]))
        if team.active_agent is not before_agent:
            _show_conversation(team)
        else:
            for message in team.active.transcript[before:]:
                _print_message(team, message)
    elif name == "/clear":
        if await team.clear():
            _show_conversation(team)
    elif name == "/settings":
        await _settings_command(team, rest)
    else:
        print(HELP_TEXT)


async def _settings_command(team: AgentTeam, rest: str) -> None:
    current = await team.settings()
    parts = rest.split()
    if not parts:
        print(f"model={current.model} temperature={current.temperature:.1f}")
        return
    try:
        requested = AgentSettings(
            model=parts[0],
            temperature=float(parts[1]) if len(parts) > 1 else current.temperature,
        )
        saved = await team.update_settings(requested)
    except (EntitlementError, UnknownModelError) as e:
        print(f"Not saved: {e}")
        return
    except (ValueError, ValidationError) as e:
        print(f"Invalid settings: {e}")
        return
    print(f"Saved: model={saved.model} temperature={saved.temperature:.1f}")


if __name__ == "__main__":
    main()
