"""
Command-line interface for resumable book translation jobs
"""
import os
import sys
import argparse

from tqdm.auto import tqdm

from booktrans.config import (
    API_ENDPOINT,
    CACHE_DB_PATH,
    DEFAULT_BATCH_SIZE,
    DEFAULT_MODEL,
    DEFAULT_SOURCE_LANGUAGE,
    DEFAULT_TARGET_LANGUAGE,
    LLM_PROVIDER,
    OPENAI_API_KEY,
    TranslationConfig
)
from booktrans.core.exceptions import BookTranslationError
from booktrans.core.job_controller import JobController
from booktrans.core.models import JobStatus, StartOutcome
from booktrans.core.translator import Translator
from booktrans.persistence import ContentCache
from booktrans.utils.file_utils import get_unique_output_path, load_units, write_translated_text
from booktrans.utils.unified_logger import setup_cli_logger, LogType


def build_parser():
    provider_options = argparse.ArgumentParser(add_help=False)
    provider_options.add_argument("-sl", "--source_lang", default=DEFAULT_SOURCE_LANGUAGE, help=f"Source language (default: {DEFAULT_SOURCE_LANGUAGE}).")
    provider_options.add_argument("-tl", "--target_lang", default=DEFAULT_TARGET_LANGUAGE, help=f"Target language (default: {DEFAULT_TARGET_LANGUAGE}).")
    provider_options.add_argument("-m", "--model", default=DEFAULT_MODEL, help=f"LLM model (default: {DEFAULT_MODEL}).")
    provider_options.add_argument("--api_endpoint", default=API_ENDPOINT, help=f"API endpoint for Ollama or OpenAI compatible provider (default: {API_ENDPOINT}).")
    provider_options.add_argument("--provider", default=LLM_PROVIDER, choices=["ollama", "openai"], help=f"LLM provider to use (default: {LLM_PROVIDER}).")
    provider_options.add_argument("--openai_api_key", default=OPENAI_API_KEY, help="API key for the OpenAI compatible provider.")
    provider_options.add_argument("--custom_instructions", default="", help="Extra instructions added to every prompt.")

    parser = argparse.ArgumentParser(description="Translate book sentences with an LLM, reusing cached translations.")
    parser.add_argument("--db", default=CACHE_DB_PATH, help=f"Translation cache database (default: {CACHE_DB_PATH}).")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", parents=[provider_options], help="Translate an input file.")
    run.add_argument("-i", "--input", required=True, help="Input file (.txt: one sentence per line, or .json list).")
    run.add_argument("-o", "--output", default=None, help="Write the translated text to this file when done.")
    run.add_argument("--owner", default=None, help="Cache owner id (default: input file name).")
    run.add_argument("--title", default=None, help="Job title (default: input file name).")
    run.add_argument("-bs", "--batch_size", type=int, default=DEFAULT_BATCH_SIZE, help=f"Sentences per request (default: {DEFAULT_BATCH_SIZE}).")

    subparsers.add_parser("stats", help="Show cache statistics.")
    subparsers.add_parser("clear", help="Delete every cached translation.")

    delete = subparsers.add_parser("delete", help="Delete the cached translations of one owner.")
    delete.add_argument("--owner", required=True, help="Cache owner id.")

    lookup = subparsers.add_parser("lookup", parents=[provider_options], help="Show (or produce) the translation of one sentence.")
    lookup.add_argument("--owner", required=True, help="Cache owner id.")
    lookup.add_argument("--translate", action="store_true", help="Ask the provider when the sentence is not cached.")
    lookup.add_argument("text", help="Sentence to look up.")

    return parser


def build_controller(args, cache):
    config = TranslationConfig.from_cli_args(args)
    if config.llm_provider == "openai" and not config.openai_api_key:
        raise BookTranslationError("--openai_api_key is required when using openai provider")
    return JobController(
        cache,
        translator=Translator.from_config(config),
        window_delay=config.window_delay,
        source_language=config.source_language,
        target_language=config.target_language,
        custom_instructions=config.custom_instructions
    )


def run_job(args, cache, logger):
    units = load_units(args.input)
    name = os.path.splitext(os.path.basename(args.input))[0]
    owner_id = args.owner or name
    title = args.title or name

    controller = build_controller(args, cache)

    progress_bar = tqdm(total=len(units), desc=f"Translating {args.source_lang} to {args.target_lang}", unit="unit")

    def on_update(snapshot):
        if snapshot is not None:
            progress_bar.n = snapshot.completed_units
            progress_bar.refresh()

    unsubscribe = controller.subscribe(on_update)
    try:
        outcome = controller.start(owner_id, title, units, args.batch_size)
        if outcome == StartOutcome.ALREADY_COMPLETE:
            progress_bar.n = len(units)
            progress_bar.refresh()
        else:
            try:
                while not controller.wait(timeout=0.5):
                    pass
            except KeyboardInterrupt:
                controller.pause()
                controller.wait()
                tqdm.write("\nTranslation paused. Run the same command again to continue; cached sentences are skipped.")
                return 130
    finally:
        unsubscribe()
        progress_bar.close()

    job = controller.get_current()
    if job is not None and job.status == JobStatus.FAILED:
        logger.error(f"Translation failed: {job.error_message}", LogType.ERROR_DETAIL, {
            'details': job.error_message
        })
        return 1

    if args.output:
        output_path = get_unique_output_path(args.output)
        translations = cache.batch_get(owner_id, [unit.text for unit in units])
        translated = write_translated_text(output_path, units, translations)
        logger.info(f"Wrote {output_path} ({translated}/{len(units)} sentences translated)")
    return 0


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logger = setup_cli_logger(enable_colors=not args.no_color)
    cache = ContentCache(args.db)

    try:
        if args.command == "run":
            return run_job(args, cache, logger)

        if args.command == "stats":
            stats = cache.stats()
            print(f"Cached translations: {stats.entry_count}")
            print(f"Owners: {stats.distinct_owner_count}")
        elif args.command == "clear":
            print(f"Deleted {cache.clear_all()} cached translations")
        elif args.command == "delete":
            print(f"Deleted {cache.delete_by_owner(args.owner)} cached translations for {args.owner}")
        elif args.command == "lookup":
            entry = cache.get(args.owner, args.text)
            if entry is not None:
                print(entry.translated_text)
            elif args.translate:
                print(build_controller(args, cache).translate_unit(args.owner, args.text))
            else:
                print("Not cached")
                return 1
        return 0
    except (BookTranslationError, FileNotFoundError, ValueError) as e:
        logger.error(f"{e}", LogType.ERROR_DETAIL, {'details': repr(e)})
        return 1
    finally:
        cache.close()


if __name__ == "__main__":
    sys.exit(main())
