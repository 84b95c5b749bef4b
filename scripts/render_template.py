"""Render a template JSON file to preview or production markup."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from mailforge.compiler import compile_template, load_template
from mailforge.exceptions import TemplateLoadError
from mailforge.utils.logging_config import configure_logging
from mailforge.validation import format_validation_errors, has_blocking_errors


def main() -> int:
    parser = argparse.ArgumentParser(description="Render a mailforge template document.")
    parser.add_argument("template", help="Path to the template JSON file")
    parser.add_argument(
        "--mode",
        choices=("preview", "production", "variables", "issues"),
        default="preview",
        help="What to print (default: preview)",
    )
    parser.add_argument("--values", help="JSON file with runtime values for the preview")
    parser.add_argument("--log-level", default="WARNING", help="Log level for pipeline warnings")
    args = parser.parse_args()

    configure_logging(args.log_level)

    try:
        template = load_template(read_text(args.template))
        runtime_values = json.loads(read_text(args.values)) if args.values else None
    except (OSError, TemplateLoadError, json.JSONDecodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    compiled = compile_template(template, runtime_values)

    if args.mode == "preview":
        print(f"Subject: {compiled.subject_preview}\n")
        print(compiled.preview_html)
    elif args.mode == "production":
        print(f"Subject: {compiled.production_subject}\n")
        print(compiled.production_html)
    elif args.mode == "variables":
        payload = [variable.to_request() for variable in compiled.variables]
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        print(format_validation_errors(compiled.issues) or "No issues found.")

    return 1 if has_blocking_errors(compiled.issues) and args.mode == "issues" else 0


def read_text(file_path: str) -> str:
    path = Path(file_path)
    if not path.is_file():
        raise FileNotFoundError(f"File not found: {path}")
    return path.read_text(encoding="utf-8")


if __name__ == "__main__":
    sys.exit(main())
