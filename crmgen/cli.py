#!/usr/bin/env python3
"""
Command line entry for the scaffold generator.

Usage:
    crmgen generate task.yaml -o ./output
    crmgen project models.yaml -o ./output
    crmgen teardown Task -o ./output
    crmgen seed
"""
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from crmgen.core.config import settings
from crmgen.core.logging import configure_logging
from crmgen.generators.scaffold.errors import ScaffoldError, SpecValidationError
from crmgen.generators.scaffold.generator import generate_model, generate_project, teardown_model

log = logging.getLogger(__name__)


def load_spec_file(path: Path) -> Dict[str, Any]:
    """Read a YAML or JSON spec file into a dict."""
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise SpecValidationError([{"field": "-", "message": f"{path} is not valid: {e}"}]) from e
    if not isinstance(data, dict):
        raise SpecValidationError([{"field": "-", "message": f"{path} must contain a mapping"}])
    return data


def cmd_generate(args) -> int:
    data = load_spec_file(Path(args.spec))
    requirements = data.pop("requirements", None)
    artifacts = generate_model(data, Path(args.output), requirements)
    for path in artifacts.paths():
        print(f"created {path}")
    return 0


def cmd_project(args) -> int:
    data = load_spec_file(Path(args.spec))
    models: List[Dict[str, Any]] = data.get("models") or []
    if not models:
        raise SpecValidationError([{"field": "models", "message": "at least one model is required"}])
    results = generate_project(models, Path(args.output), data.get("requirements"))
    for artifacts in results:
        for path in artifacts.paths():
            print(f"created {path}")
    return 0


def cmd_teardown(args) -> int:
    removed = teardown_model(args.model_name, Path(args.output))
    for path in removed:
        print(f"removed {path}")
    if not removed:
        print(f"nothing to remove for {args.model_name}")
    return 0


def cmd_seed(args) -> int:
    from crmgen.db.seed import seed_defaults
    from crmgen.db.session import SessionLocal

    with SessionLocal() as db:
        seed_defaults(db)
    print("default data seeded")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="crmgen", description="Generate CRUD backend files from model specs")
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Generate files for one model")
    gen.add_argument("spec", help="YAML or JSON model spec")
    gen.add_argument("-o", "--output", default=settings.generator_output_dir, help="Output directory")
    gen.set_defaults(func=cmd_generate)

    proj = sub.add_parser("project", help="Generate a backend for several models")
    proj.add_argument("spec", help="YAML or JSON file with a 'models' list")
    proj.add_argument("-o", "--output", default=settings.generator_output_dir, help="Output directory")
    proj.set_defaults(func=cmd_project)

    down = sub.add_parser("teardown", help="Remove a generated model")
    down.add_argument("model_name", help="Model name, e.g. Task")
    down.add_argument("-o", "--output", default=settings.generator_output_dir, help="Output directory")
    down.set_defaults(func=cmd_teardown)

    seed = sub.add_parser("seed", help="Insert default CRM data")
    seed.set_defaults(func=cmd_seed)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    configure_logging()
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except SpecValidationError as e:
        for err in e.errors:
            print(f"error: {err['field']}: {err['message']}", file=sys.stderr)
        return 2
    except (ScaffoldError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
