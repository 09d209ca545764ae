"""
Run an interview in the terminal.

    python -m interview_engine --session-id demo --context context.json
"""

import argparse
import asyncio
import json
import sys
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv

from interview_engine.app import build_session
from interview_engine.config.settings import DEFAULT_CONFIG_PATH, ConfigError, load_engine_config
from interview_engine.llm.exceptions import LLMConfigError
from interview_engine.speech.console import ConsoleRecognitionEngine, ConsoleSynthesisEngine
from interview_engine.utils.logger import setup_logger


async def run_interview(args: argparse.Namespace) -> int:
    config = load_engine_config(args.config)

    context = None
    if args.context:
        with open(args.context, encoding="utf-8") as f:
            context = json.load(f)

    recognition = ConsoleRecognitionEngine()
    runtime = build_session(
        config,
        args.session_id,
        context=context,
        recognition=recognition,
        synthesis=ConsoleSynthesisEngine(realtime=not args.fast),
        log_to_console=False,
    )

    try:
        await runtime.orchestrator.start()
        await runtime.orchestrator.wait_until_complete()
    finally:
        await runtime.close()
        await recognition.aclose()

    summary = runtime.flow.summary
    if summary is not None:
        print("\n" + "=" * 60)
        print(summary.conclusion)
        for label, items in (
            ("Key points", summary.key_points),
            ("Insights", summary.insights),
            ("Next steps", summary.next_steps),
        ):
            print(f"\n{label}:")
            for item in items:
                print(f"  - {item}")
        analytics = summary.engagement_analytics
        print(
            f"\nEngagement: {analytics.average_engagement_score}/10, "
            f"mostly {analytics.dominant_sentiment}"
        )
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Conversational interview engine (terminal mode)")
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Engine config YAML")
    parser.add_argument(
        "--session-id",
        default=datetime.now().strftime("%Y%m%d_%H%M%S"),
        help="Session to start or resume",
    )
    parser.add_argument("--context", type=Path, help="JSON file of earlier workshop answers")
    parser.add_argument("--fast", action="store_true", help="Do not wait out speech duration")

    args = parser.parse_args()

    load_dotenv()
    setup_logger("interview_engine", log_to_console=False)

    try:
        return asyncio.run(run_interview(args))
    except (ConfigError, LLMConfigError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
