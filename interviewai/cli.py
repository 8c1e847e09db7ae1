"""Terminal rehearsal driver: typed questions stand in for the live transcript."""
from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Optional

from interviewai.app.core.config import ALLOWED_AI_MODELS, DEFAULT_AI_MODEL, settings
from interviewai.app.core.logging_config import get_logger, setup_logging
from interviewai.client.ai_gateway import AIResponseGateway
from interviewai.client.api import InterviewAPI
from interviewai.client.controller import SessionLifecycleController
from interviewai.client.errors import ApiError
from interviewai.client.models import WizardParams
from interviewai.client.persistence import JsonFileSessionCache

logger = get_logger("cli")

HELP = """Type an interview question and press Enter.
  :model <id>   switch AI model ({models})
  :history      show the conversation so far
  :time         show remaining trial time
  :end          end the session
  :help         show this help"""


def _print_history(controller: SessionLifecycleController) -> None:
    if not controller.view.conversation:
        print("(no questions yet)")
    for i, entry in enumerate(controller.view.conversation, start=1):
        print(f"[{i}] Q: {entry.question}")
        if entry.aiResponse:
            print(f"    A ({entry.aiResponse.confidence:.2f}): {entry.aiResponse.answer}")


async def _authenticate(api: InterviewAPI, args: argparse.Namespace) -> None:
    if args.register:
        await api.register(args.name or args.email.split("@")[0], args.email, args.password)
    else:
        await api.login(args.email, args.password)


async def _read_line(prompt: str) -> Optional[str]:
    try:
        return await asyncio.to_thread(input, prompt)
    except EOFError:
        return None


async def run(args: argparse.Namespace) -> int:
    api = InterviewAPI(base_url=args.api_url)
    controller = SessionLifecycleController(
        api,
        AIResponseGateway(),
        cache=JsonFileSessionCache(args.cache_dir),
        notify=lambda message: print(f"! {message}"),
        navigate=lambda route: print(f"Session ended. Review it under {route}."),
    )
    try:
        try:
            await _authenticate(api, args)
        except ApiError as e:
            print(f"Authentication failed: {e.message}")
            return 1

        if args.new:
            controller.start_new()
        wizard = None
        if args.session_id is None and args.company and args.position:
            wizard = WizardParams(
                sessionType=args.type,
                company=args.company,
                position=args.position,
                resumeId=args.resume_id,
                language=args.language,
                simpleEnglish=args.simple_english,
                extraInstructions=args.instructions,
                aiModel=args.model,
            )
        view = await controller.initialize(existing_id=args.session_id, wizard=wizard)
        if view.error:
            print(f"Could not start session: {view.error}")
            return 1

        session = view.session
        print(f"Rehearsing {session.position} at {session.company} ({session.sessionType}, model {view.selectedModel})")
        print(HELP.format(models=", ".join(ALLOWED_AI_MODELS)))
        countdown = asyncio.create_task(controller.run_countdown())
        try:
            while not controller.ended:
                line = await _read_line("> ")
                if line is None or controller.ended:
                    break
                line = line.strip()
                if not line:
                    continue
                if line == ":end":
                    break
                if line == ":help":
                    print(HELP.format(models=", ".join(ALLOWED_AI_MODELS)))
                elif line == ":history":
                    _print_history(controller)
                elif line == ":time":
                    minutes, seconds = divmod(controller.view.timeRemaining, 60)
                    print(f"{minutes}:{seconds:02d} remaining" if controller.view.is_trial else "No time limit")
                elif line.startswith(":model"):
                    print(f"Model: {controller.switch_model(line[len(':model'):].strip())}")
                else:
                    entry = await controller.submit_question(line)
                    if entry and entry.aiResponse:
                        print(f"\n{entry.aiResponse.answer}\n(confidence {entry.aiResponse.confidence:.2f})\n")
        finally:
            countdown.cancel()
            await controller.end_session()
        return 0
    finally:
        await api.aclose()


def main() -> None:
    parser = argparse.ArgumentParser(description="InterviewAI terminal rehearsal")
    parser.add_argument("--api-url", default=settings.api_base_url, help="InterviewAI API base URL")
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--register", action="store_true", help="Create the account first")
    parser.add_argument("--name", help="Display name when registering")
    parser.add_argument("--session-id", type=int, help="Resume an existing session")
    parser.add_argument("--company")
    parser.add_argument("--position")
    parser.add_argument("--type", choices=("trial", "premium"), default="trial")
    parser.add_argument("--resume-id", type=int)
    parser.add_argument("--language", default="English")
    parser.add_argument("--simple-english", action="store_true")
    parser.add_argument("--instructions", default="", help="Extra instructions for the AI candidate")
    parser.add_argument("--model", default=DEFAULT_AI_MODEL, choices=ALLOWED_AI_MODELS)
    parser.add_argument("--cache-dir", default=settings.session_cache_dir)
    parser.add_argument("--new", action="store_true", help="Discard any cached in-progress trial")
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args()

    setup_logging(args.log_level, stream=sys.stderr)
    raise SystemExit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
