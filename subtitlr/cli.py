#!/usr/bin/env python3
"""
Subtitlr: AI-assisted subtitle generation for YouTube videos.

Transcribes speech with the OpenAI Whisper API into SRT subtitles and
translates them with the DeepL document API.
"""

import argparse
import logging
import signal
import sys
import threading

from subtitlr.config import get_settings, mask_secret, write_api_key
from subtitlr.deepl_client import DeepLClient, translate_document
from subtitlr.errors import SubtitlrError, ValidationError
from subtitlr.pipeline import generate_subtitles

logger = logging.getLogger(__name__)


def configure_command(args: argparse.Namespace) -> int:
    if not write_api_key(args.api_key, args.env_file):
        print(f"The {args.env_file} file already exists in your current directory", file=sys.stderr)
        return 1

    print(f"The {args.env_file} file has been created in your current directory")
    print(f"apiKey: {mask_secret(args.api_key)}")
    return 0


def generate_command(args: argparse.Namespace) -> int:
    print(f"Generating subtitles ({args.lang}) from {args.id or args.file}")
    output = generate_subtitles(
        language=args.lang,
        output=args.output,
        api_key=args.api_key,
        video_id=args.id,
        audio_file=args.file,
    )
    print(f"Subtitles generated successfully: {output}")
    return 0


def translate_command(args: argparse.Namespace) -> int:
    settings = get_settings()
    api_key = args.api_key_deepl or settings.deepl_api_key
    if not api_key:
        raise ValidationError("DeepL API key is missing; pass --api-key-deepl")

    print(f"Translating {args.input} to {args.lang}")
    with DeepLClient(
        api_key,
        settings.resolve_deepl_api_url(api_key),
        timeout=settings.translation_timeout,
    ) as client:
        output = translate_document(
            client,
            args.input,
            args.lang,
            args.output,
            poll_interval=settings.poll_interval,
            max_wait=settings.poll_max_wait,
        )
    print(f"File downloaded successfully: {output}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="subtitlr",
        description="AI-assisted subtitle generation CLI for YouTube",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    configure = subparsers.add_parser(
        "configure", help="Create a .env file with your OpenAI API key"
    )
    configure.add_argument("--api-key", "--apiKey", dest="api_key", required=True, help="OpenAI API key")
    configure.add_argument("--env-file", default=".env", help="Dotfile to create (default: .env)")
    configure.set_defaults(handler=configure_command)

    generate = subparsers.add_parser(
        "generate", help="Generate SRT subtitles from a YouTube video or an MP3 file"
    )
    generate.add_argument("--id", help="YouTube video ID or URL (or --file)")
    generate.add_argument("--file", help="Audio file MP3 (or --id)")
    generate.add_argument(
        "--lang", "-l", default="fr", help="Language (in ISO 639-1 format) spoken in the video (default: fr)"
    )
    generate.add_argument("--output", "-o", default="output.srt", help="Output file (default: output.srt)")
    generate.add_argument(
        "--api-key", "--apiKey", dest="api_key", help="OpenAI API key (default: OPENAI_API_KEY from .env)"
    )
    generate.set_defaults(handler=generate_command)

    translate = subparsers.add_parser("translate", help="Translate SRT subtitles with DeepL")
    translate.add_argument("--input", required=True, help="Input subtitle file")
    translate.add_argument("--lang", required=True, help="Target language (e.g. 'en', 'de')")
    translate.add_argument("--output", required=True, help="Output file")
    translate.add_argument(
        "--api-key-deepl", "--apiKeyDeepL", dest="api_key_deepl", help="DeepL API key (default: DEEPL_API_KEY)"
    )
    translate.set_defaults(handler=translate_command)

    return parser


def _terminate(signum, frame):
    raise KeyboardInterrupt


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    if threading.current_thread() is threading.main_thread():
        signal.signal(signal.SIGTERM, _terminate)

    try:
        return args.handler(args)
    except SubtitlrError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error during {e.stage}: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Cancelled", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
