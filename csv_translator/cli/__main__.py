from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

import pandas as pd
from dotenv import load_dotenv

from csv_translator.config.loader import DEFAULT_CONFIG_PATH, ConfigError, TranslateConfig, load_config
from csv_translator.logging.error_log import ErrorLogBuffer
from csv_translator.logging.init import log_summary, set_debug, setup_logging
from csv_translator.services.backend import BackendError, GoogleTranslateBackend, TranslationBackend
from csv_translator.services.cache import TranslationCache
from csv_translator.services.cell_translator import CellTranslator
from csv_translator.services.column_policy import ColumnPolicy
from csv_translator.services.orchestrator import ProcessingError, translate_file
from csv_translator.services.summary import render_summary_line
from csv_translator.tabular.reader import preview_csv

"""CLI entrypoint.

    csv-translate <input.csv> [exclude_cols] [options]

Flow:
- Load `.env`, then the optional YAML config, then apply CLI overrides
- Resolve the Google Cloud project (fatal if missing, before any file I/O)
- Translate the file and print the SUMMARY line

Exit codes: 0 success, 1 fatal (startup / structural), 2 finished but some
cells fell back to pass-through, 130 interrupted.
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2
EXIT_INTERRUPTED = 130

PROJECT_ENV_VAR = "GOOGLE_CLOUD_PROJECT"


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv.

    override=True: .env の値で既存環境変数を上書きする。
    失敗時は警告を出すのみで続行。
    """
    try:
        if path.exists():
            load_dotenv(dotenv_path=path, override=override)
    except OSError as e:  # pragma: no cover
        print(f"WARNING: failed to load .env via python-dotenv: {e}")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="csv-translate",
        description="Translate the text cells of a CSV file (Google Cloud Translation)",
    )
    p.add_argument("input", help="Input CSV file (first row is the header)")
    p.add_argument(
        "exclude_cols",
        nargs="?",
        default="",
        help="Comma-separated column names to copy untranslated, e.g. 'id,tel,postal'",
    )
    p.add_argument("--config", type=Path, default=None, help=f"YAML config (default: {DEFAULT_CONFIG_PATH})")
    p.add_argument("--target-language", default=None, help="Target language code (default: en)")
    p.add_argument("--location", default=None, help="Translation API location (default: global)")
    p.add_argument("--workers", type=int, default=None, help="Concurrent backend calls per row (default: 1)")
    p.add_argument("--timeout", type=float, default=None, help="Per-request timeout in seconds (default: 30)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print header & first rows then exit")
    return p.parse_args(argv)


def _create_backend(cfg: TranslateConfig, project_id: str) -> TranslationBackend:
    return GoogleTranslateBackend(
        project_id=project_id,
        location=cfg.location,
        target_language=cfg.target_language,
        timeout=cfg.request_timeout,
    )


def _inspect_data(path: Path) -> int:
    print(f"FILE: {path.name}")
    try:
        df = preview_csv(path)
    except FileNotFoundError:
        print(f"inspect: file not found: {path}")
        return EXIT_FATAL
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as e:
        print(f"  read_error: {e}")
        return EXIT_FATAL
    print(f"  cols={list(df.columns)}")
    print("  sample_rows=", df.to_dict(orient="records"))
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # [] が渡された場合に sys.argv (pytest の引数) を読まないよう None のときのみ参照
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)
    try:
        if args.config is not None:
            cfg = load_config(args.config, required=True)
        else:
            cfg = load_config(DEFAULT_CONFIG_PATH)
        cfg = cfg.with_overrides(
            target_language=args.target_language,
            location=args.location,
            max_workers=args.workers,
            request_timeout=args.timeout,
        )
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    input_path = Path(args.input)
    if args.inspect_data:
        return _inspect_data(input_path)

    project_id = os.getenv(PROJECT_ENV_VAR) or cfg.project_id
    if not project_id:
        logger.error(f"config: environment variable {PROJECT_ENV_VAR} not set")
        return EXIT_FATAL

    policy = ColumnPolicy.from_names(cfg.exclude_columns).union(ColumnPolicy.from_arg(args.exclude_cols))

    try:
        backend = _create_backend(cfg, project_id)
    except BackendError as e:
        logger.error(f"backend: {e}")
        return EXIT_FATAL

    translator = CellTranslator(
        backend,
        cache=TranslationCache(),
        policy=policy,
        error_log=ErrorLogBuffer(),
    )
    logger.info(
        f"Translating {input_path} -> {cfg.target_language} "
        f"(excluded={sorted(policy.excluded)} workers={cfg.max_workers})"
    )
    try:
        result = translate_file(
            input_path,
            translator,
            output_suffix=cfg.output_suffix,
            max_workers=cfg.max_workers,
        )
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL
    except KeyboardInterrupt:
        # 入力オープン・ヘッダ読込中の割り込み
        logger.warning(f"interrupted before processing {input_path}")
        return EXIT_INTERRUPTED
    finally:
        close = getattr(backend, "close", None)
        if callable(close):
            close()

    summary_line = render_summary_line(result)
    # log_summary が "SUMMARY " を付与するので除去
    log_summary(summary_line[len("SUMMARY "):])

    if result.cancelled:
        return EXIT_INTERRUPTED
    if result.failed_cells > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
