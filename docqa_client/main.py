"""
Command-line entry point: stream one answer to stdout.
"""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys

from docqa_client.chat_client import ChatStreamClient
from docqa_client.config import Configuration
from docqa_client.logging_utils import configure_logging, operation_context
from docqa_client.models import ChatRequest

EXIT_OK = 0
EXIT_STREAM_ERROR = 1
EXIT_ABORTED = 130


async def run_question(
    config: Configuration,
    request: ChatRequest,
    client: ChatStreamClient | None = None,
) -> int:
    """Stream the answer to ``request``; Ctrl-C aborts the stream."""
    failures: list[str] = []

    def on_message(text: str) -> None:
        sys.stdout.write(text)
        sys.stdout.flush()

    def on_done() -> None:
        sys.stdout.write("\n")
        sys.stdout.flush()

    def on_error(message: str) -> None:
        failures.append(message)
        print(f"\nError: {message}", file=sys.stderr)

    async with client or ChatStreamClient(config) as chat_client:
        async with operation_context(
            "chat_stream",
            context={"collection": request.collection(chat_client.default_collection)},
        ):
            handle = chat_client.send_message_stream(
                request, on_message, on_done, on_error
            )

            loop = asyncio.get_running_loop()
            if sys.platform != "win32":
                loop.add_signal_handler(signal.SIGINT, handle.abort)
            try:
                await handle.wait()
            finally:
                if sys.platform != "win32":
                    loop.remove_signal_handler(signal.SIGINT)

    if handle.cancelled:
        return EXIT_ABORTED
    return EXIT_STREAM_ERROR if failures else EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docqa-stream",
        description="Ask the document-QA service a question and stream the answer.",
    )
    parser.add_argument("question", help="question to ask")
    parser.add_argument(
        "--kb",
        action="append",
        dest="knowledge_bases",
        metavar="NAME",
        help="knowledge base to search (repeatable)",
    )
    parser.add_argument("--config", help="path to a config.yaml")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    config = Configuration(args.config)
    configure_logging(config.get_logging_config()["level"])

    request = ChatRequest(
        message=args.question,
        knowledge_base_ids=args.knowledge_bases,
    )
    sys.exit(asyncio.run(run_question(config, request)))


if __name__ == "__main__":
    main()
