"""Code Tutor command-line interface.

Usage:
    python -m code_tutor ask "Why does my loop never end?" --level intermediate
    python -m code_tutor format reply.md --report
    python -m code_tutor history --limit 20
    python -m code_tutor history --sessions
    python -m code_tutor export --output conversations.json
    python -m code_tutor cleanup --days 30
    python -m code_tutor reset --yes
"""

import argparse
import asyncio
import json
import sys
from datetime import datetime
from typing import Optional

from code_tutor import config
from code_tutor.client import create_client
from code_tutor.context import StudentContextManager
from code_tutor.logger import logger, setup_logging
from code_tutor.pipeline import finalise_reply, handle_chat
from code_tutor.store import ConversationStore
from code_tutor.types import LearningLevel


def _print_report(report) -> None:
    print("\n--- Accessibility Report ---")
    print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))


async def cmd_ask(contexts: StudentContextManager, args) -> int:
    """Send one message through the full pipeline."""
    if args.level:
        contexts.update_learning_level(args.level)
    if args.new_session:
        contexts.start_new_session()

    result = await handle_chat(args.message, contexts, create_client(), session_id=args.session)
    print(result.reply)

    if args.report and result.report:
        _print_report(result.report)
    return 1 if result.was_refused else 0


def cmd_format(args) -> int:
    """Format a reply read from a file (or stdin) and print it."""
    if args.file and args.file != "-":
        with open(args.file, encoding="utf-8") as f:
            raw = f.read()
    else:
        raw = sys.stdin.read()

    formatted = finalise_reply(raw)
    print(formatted.content)

    if args.report:
        _print_report(formatted.report)
    return 0


def cmd_history(store: ConversationStore, contexts: StudentContextManager, args) -> int:
    """Show recent messages or the list of sessions."""
    if args.sessions:
        print("\n=== Sessions ===\n")
        for session in store.list_sessions():
            updated = datetime.fromtimestamp(session["last_updated_at"]).strftime("%Y-%m-%d %H:%M")
            print(f"  {session['session_id']}  {session['message_count']:>4} message(s)  {updated}")
        return 0

    context = contexts.get_context(args.session)
    messages = store.get_recent(context.session_id, args.limit)
    print(f"\n=== {context.session_id} ({context.learning_level.value}) ===\n")
    if not messages:
        print("No messages yet.")
    for message in messages:
        when = datetime.fromtimestamp(message.timestamp).strftime("%H:%M")
        speaker = "You" if message.role.value == "student" else "Tutor"
        print(f"[{when}] {speaker}: {message.content}\n")
    return 0


def cmd_export(store: ConversationStore, args) -> int:
    """Export every conversation as JSON."""
    exported = store.export_all()
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(exported)
        print(f"Exported conversations to {args.output}")
    else:
        print(exported)
    return 0


def cmd_cleanup(store: ConversationStore, args) -> int:
    deleted = store.cleanup(max_age_days=args.days)
    print(f"Deleted {deleted} session(s) older than {args.days} days")
    return 0


def cmd_reset(contexts: StudentContextManager, args) -> int:
    if not args.yes:
        print("Refusing to delete all data without --yes")
        return 2
    contexts.reset_all()
    print("All conversations and preferences deleted")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="code_tutor",
        description="Code Tutor - programming tutor pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--db", help=f"Conversation database (default: {config.STORE_DB})")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # ask command
    ask_parser = subparsers.add_parser("ask", help="Ask the tutor a question")
    ask_parser.add_argument("message", help="Question text (may contain ``` code fences)")
    ask_parser.add_argument("--level", choices=[level.value for level in LearningLevel],
                            help="Set the learning level before asking")
    ask_parser.add_argument("--session", help="Session to continue")
    ask_parser.add_argument("--new-session", action="store_true", help="Start a fresh session first")
    ask_parser.add_argument("--report", action="store_true", help="Print the accessibility report")

    # format command
    format_parser = subparsers.add_parser("format", help="Format and audit a reply")
    format_parser.add_argument("file", nargs="?", help="Markdown file (default: stdin)")
    format_parser.add_argument("--report", action="store_true", help="Print the accessibility report")

    # history command
    history_parser = subparsers.add_parser("history", help="Show conversation history")
    history_parser.add_argument("--limit", type=int, default=10)
    history_parser.add_argument("--session", help="Session to show (default: current)")
    history_parser.add_argument("--sessions", action="store_true", help="List sessions instead")

    # export command
    export_parser = subparsers.add_parser("export", help="Export all conversations as JSON")
    export_parser.add_argument("--output", "-o", help="Write to file instead of stdout")

    # cleanup command
    cleanup_parser = subparsers.add_parser("cleanup", help="Delete old sessions")
    cleanup_parser.add_argument("--days", type=int, default=config.SESSION_MAX_AGE_DAYS)

    # reset command
    reset_parser = subparsers.add_parser("reset", help="Delete all conversations and preferences")
    reset_parser.add_argument("--yes", action="store_true", help="Confirm deletion")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()

    if args.command == "format":
        return cmd_format(args)

    store = ConversationStore(args.db)
    contexts = StudentContextManager(store)
    try:
        if args.command == "ask":
            return asyncio.run(cmd_ask(contexts, args))
        elif args.command == "history":
            return cmd_history(store, contexts, args)
        elif args.command == "export":
            return cmd_export(store, args)
        elif args.command == "cleanup":
            return cmd_cleanup(store, args)
        elif args.command == "reset":
            return cmd_reset(contexts, args)
    except Exception as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        store.close()
    return 0
