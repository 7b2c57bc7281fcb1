"""
Skillforge CLI - Command-line interface for the engine.

Usage:
    skillforge parse "<line>"                  Show the parsed fields of a line
    skillforge validate "<line>" --context mob Validate a line in context
    skillforge analyze <lines_file>            Duplicates, similar lines, groups
    skillforge batch <yaml_file> [--json]      Analyze a whole document
    skillforge serve [--host --port]           Run the HTTP API

Settings come from the environment (see skillforge.config).
"""

import argparse
import json
import logging
import sys

from .catalog import CatalogError
from .config import ConfigError, EngineSettings, configure_logging

logger = logging.getLogger(__name__)


def main(argv=None):
    """Main CLI entry point. Returns the process exit code."""
    parser = argparse.ArgumentParser(
        description="Skillforge - Skill-Line DSL Engine",
        prog="skillforge",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Parse command
    parse_parser = subparsers.add_parser("parse", help="Parse a skill line")
    parse_parser.add_argument("line", help="Skill line, e.g. \"- damage{a=10} @target\"")
    parse_parser.add_argument("--strict", action="store_true",
                              help="Reject malformed health modifiers")
    parse_parser.add_argument("--json", action="store_true", help="Print JSON")

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate a skill line")
    validate_parser.add_argument("line", help="Skill line to validate")
    validate_parser.add_argument("--context", default="skill", choices=["mob", "skill"],
                                 help="Where the line lives (default: skill)")

    # Analyze command
    analyze_parser = subparsers.add_parser("analyze", help="Analyze a file of skill lines")
    analyze_parser.add_argument("lines_file", help="Text file with one skill line per row")
    analyze_parser.add_argument("--threshold", type=float, help="Similarity threshold (0-1)")
    analyze_parser.add_argument("--json", action="store_true", help="Print JSON")

    # Batch command
    batch_parser = subparsers.add_parser("batch", help="Analyze a YAML document")
    batch_parser.add_argument("yaml_file", help="YAML file of mobs and metaskills")
    batch_parser.add_argument("--threshold", type=float, help="Similarity threshold (0-1)")
    batch_parser.add_argument("--json", action="store_true", help="Print JSON")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    try:
        settings = EngineSettings.from_env()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    configure_logging(settings.log_level)

    commands = {
        "parse": cmd_parse,
        "validate": cmd_validate,
        "analyze": cmd_analyze,
        "batch": cmd_batch,
        "serve": cmd_serve,
    }
    try:
        return commands[args.command](args, settings)
    except CatalogError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


def cmd_parse(args, settings):
    """Show the parsed fields of a line."""
    from .api.service import EngineService

    response = EngineService(settings=settings).parse(args.line, strict=args.strict)
    if args.json:
        print(json.dumps(response.model_dump(), indent=2))
        return 0 if response.valid else 1

    if not response.valid:
        print(f"Invalid line: {response.parse_error}")
        return 1

    print(f"Mechanic:   {response.mechanic_name}")
    for key, value in response.attributes.items():
        print(f"  {key} = {value}")
    print(f"Targeter:   {response.targeter or '-'}")
    print(f"Trigger:    {response.trigger or '-'}")
    for condition in response.conditions:
        print(f"Condition:  {condition.prefix}{condition.name} {condition.args or ''}".rstrip())
    print(f"Chance:     {response.chance if response.chance is not None else '-'}")
    print(f"Health:     {response.health_modifier or '-'}")
    print(f"Formatted:  {response.formatted}")
    return 0


def cmd_validate(args, settings):
    """Validate a line in mob or skill context."""
    from .dsl import SkillLineValidator, display_message, parse_line, status_line

    validator = SkillLineValidator(settings.load_catalog())
    result = validator.validate(parse_line(args.line), args.context)

    print(status_line(result))
    if result.errors or result.warnings:
        print(display_message(result))
    return 0 if result.valid else 1


def cmd_analyze(args, settings):
    """Analyze a file with one skill line per row."""
    from .api.service import EngineService

    try:
        with open(args.lines_file, "r", encoding="utf-8") as f:
            lines = f.read().splitlines()
    except FileNotFoundError:
        print(f"Error: File not found: {args.lines_file}", file=sys.stderr)
        return 1
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: Cannot read {args.lines_file}: {e}", file=sys.stderr)
        return 1

    service = EngineService(settings=settings)
    analysis = service.analyze(lines, threshold=args.threshold)
    groups = service.groups(lines)
    suggestions = service.suggest(lines, threshold=args.threshold)

    if args.json:
        print(json.dumps({
            "analysis": analysis.model_dump(),
            "groups": groups.model_dump(),
            "suggestions": suggestions.model_dump(),
        }, indent=2))
        return 0

    summary = analysis.summary
    print(f"Lines: {summary.total_lines}")
    print(f"Exact duplicate clusters: {summary.exact_duplicates} "
          f"(potential savings: {summary.potential_savings} lines)")
    for cluster in analysis.duplicates:
        rows = ", ".join(str(i + 1) for i in cluster.member_indices)
        print(f"  x{cluster.count} {cluster.source_line}  (rows {rows})")

    print(f"Similarity clusters: {summary.similar_groups}")
    for cluster in analysis.similar_groups:
        print(f"  row {cluster.base_index + 1}: {cluster.base_line}")
        for member in cluster.members:
            changes = ", ".join(
                f"{d.attribute_key or d.dimension}: {d.value_in_base} -> {d.value_in_member}"
                for d in member.differences
            )
            print(f"    row {member.index + 1} ({member.similarity:.0%}) {changes}")

    print(f"Groups: {groups.summary.total_groups}")
    for group in groups.groups:
        print(f"  {group.icon} {group.label} ({len(group.members)} lines)")
    for suggestion in groups.suggestions:
        print(f"  ⚠ {suggestion.message}")

    for cluster in suggestions.clusters:
        best = cluster.suggestions[0]
        print(f"Suggestion for rows {', '.join(str(i + 1) for i in cluster.indices)}: "
              f"{best.method} - {best.description}")
    return 0


def cmd_batch(args, settings):
    """Analyze a YAML document. Exits non-zero when any line has errors."""
    from .api.service import EngineService
    from .batch import DocumentError

    try:
        with open(args.yaml_file, "r", encoding="utf-8") as f:
            text = f.read()
    except FileNotFoundError:
        print(f"Error: File not found: {args.yaml_file}", file=sys.stderr)
        return 1
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: Cannot read {args.yaml_file}: {e}", file=sys.stderr)
        return 1

    try:
        report = EngineService(settings=settings).batch(text, threshold=args.threshold)
    except DocumentError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(report.model_dump(), indent=2))
        return 1 if report.summary.errors else 0

    summary = report.summary
    print(f"Entries: {summary.entries}  Lines: {summary.lines}  "
          f"Invalid: {summary.invalid_lines}")
    print(f"Errors: {summary.errors}  Warnings: {summary.warnings}")

    for entry in report.entries:
        print(f"\n{entry.name} ({entry.kind}, {entry.line_count} lines)")
        for line in entry.lines:
            for issue in line.errors:
                print(f"  ✗ line {line.index + 1}: {issue.message}")
            for issue in line.warnings:
                print(f"  ⚠ line {line.index + 1}: {issue.message}")
        for cluster in entry.duplicates:
            print(f"  duplicate x{cluster.count}: {cluster.source_line}")

    if report.missing_references:
        print("\nMissing references:")
        for ref in report.missing_references:
            print(f"  {ref.entry} line {ref.line_index + 1}: {ref.attribute}={ref.name}")

    if report.groupings:
        print("\nProposed groupings:")
        for grouping in report.groupings:
            print(f"  [{grouping.kind}] {grouping.label}: {', '.join(grouping.members)}")

    if report.standalone:
        print(f"\nStandalone sequences: {', '.join(report.standalone)}")

    return 1 if summary.errors else 0


def cmd_serve(args, settings):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    logger.info("Serving on %s:%d", args.host, args.port)
    uvicorn.run(
        "skillforge.api.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        log_level=settings.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
