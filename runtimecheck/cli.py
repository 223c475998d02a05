"""
CLI entry point for RuntimeCheck.

Usage:
    runtimecheck scan <refs-file-or-dir>...    Check resolver output against a target range
    runtimecheck check <dotted.path>           Classify a single API use
    runtimecheck names                         List API names accepted by the ignore options

Exit codes: 0 no findings, 1 findings reported, 2 configuration or input error
(an unreadable or malformed reference file counts as an input error).
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from runtimecheck import __version__
from runtimecheck.diagnostics import format_finding
from runtimecheck.errors import ConfigError, RegistryError
from runtimecheck.knowledge_base import REGISTRY, load_registry
from runtimecheck.options import load_config, parse_options
from runtimecheck.paths import Namespace, OperationKind
from runtimecheck.references import ResolvedReference, SourceLocation
from runtimecheck.scanner import ScanReport, analyze_reference, scan_directory, scan_file


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_CONFIG_ERROR = 2


def _registry(args):
    if getattr(args, "registry", None):
        return load_registry(*args.registry)
    return REGISTRY


def _options(args, registry):
    raw = load_config(args.config) if getattr(args, "config", None) else {}
    if args.version is not None:
        raw["version"] = args.version
    if getattr(args, "ignore_module", None):
        raw["ignoreModuleItems"] = list(raw.get("ignoreModuleItems") or []) + args.ignore_module
    if getattr(args, "ignore_global", None):
        raw["ignoreGlobalItems"] = list(raw.get("ignoreGlobalItems") or []) + args.ignore_global
    if args.allow_experimental:
        raw["allowExperimental"] = True
    project_dir = getattr(args, "project_dir", None) or Path.cwd()
    return parse_options(raw, registry=registry, project_dir=project_dir)


def cmd_scan(args):
    """Scan resolver output files or directories."""
    registry = _registry(args)
    options = _options(args, registry)

    report = ScanReport()
    for target in args.paths:
        path = Path(target)
        if path.is_dir():
            report.merge(scan_directory(path, options, registry))
        else:
            report.merge(scan_file(path, options, registry))
    report.sort()

    if args.format == "json":
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print(report)

    logger.info(f"{report.total_findings} findings in {report.files_scanned} files")
    if report.errors:
        return EXIT_CONFIG_ERROR
    return EXIT_FINDINGS if report.findings else EXIT_OK


def cmd_check(args):
    """Classify a single dotted API path."""
    registry = _registry(args)
    options = _options(args, registry)
    namespace = Namespace(args.namespace)
    path = tuple(args.path.split("."))
    if not all(segment.strip() for segment in path):
        raise ConfigError(f"Invalid API path: {args.path!r}")
    reference = ResolvedReference(
        namespace=namespace,
        path=path,
        kind=OperationKind(args.kind),
        location=SourceLocation(file="<command line>", line=0),
    )

    if registry.lookup(namespace, reference.path, reference.kind) is None:
        print(f"{args.path} ({args.kind}) is not tracked in the {namespace.value} registry.")
        return EXIT_OK

    finding = analyze_reference(reference, options, registry)
    if finding is None:
        print(f"{args.path} is fine for '{options.target_range}'.")
        return EXIT_OK
    print(format_finding(finding).message)
    return EXIT_FINDINGS


def cmd_names(args):
    """List the names accepted by ignoreModuleItems / ignoreGlobalItems."""
    registry = _registry(args)
    namespaces = [Namespace(args.namespace)] if args.namespace else list(Namespace)
    for namespace in namespaces:
        for name in sorted(registry.known_names(namespace)):
            print(f"{namespace.value}\t{name}" if len(namespaces) > 1 else name)
    return EXIT_OK


def _add_option_arguments(parser):
    parser.add_argument('--version', dest='version', default=None,
                        help='Target version or range (default: package.json engines.node)')
    parser.add_argument('--allow-experimental', action='store_true',
                        help='Treat experimental APIs as usable')
    parser.add_argument('--config', help='YAML or JSON file with rule options')
    parser.add_argument('--project-dir', help='Where to look for package.json')
    parser.add_argument('--registry', action='append', metavar='FILE',
                        help='Extra registry data file (repeatable)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog='runtimecheck',
        description='Find deprecated, removed and not-yet-supported runtime API uses',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument('-V', '--tool-version', action='version', version=f'runtimecheck {__version__}')

    subparsers = parser.add_subparsers(dest='command', required=True)

    scan_p = subparsers.add_parser('scan', help='Scan resolver output')
    scan_p.add_argument('paths', nargs='+', help='Reference files or directories')
    scan_p.add_argument('--ignore-module', action='append', metavar='NAME',
                        help='Module API name to ignore (repeatable)')
    scan_p.add_argument('--ignore-global', action='append', metavar='NAME',
                        help='Global API name to ignore (repeatable)')
    scan_p.add_argument('--format', choices=['text', 'json'], default='text')
    _add_option_arguments(scan_p)
    scan_p.set_defaults(func=cmd_scan)

    check_p = subparsers.add_parser('check', help='Classify a single API use')
    check_p.add_argument('path', help='Dotted API path, e.g. fs.exists')
    check_p.add_argument('--namespace', choices=[ns.value for ns in Namespace], default='modules')
    check_p.add_argument('--kind', choices=[k.value for k in OperationKind], default='read')
    _add_option_arguments(check_p)
    check_p.set_defaults(func=cmd_check)

    names_p = subparsers.add_parser('names', help='List ignorable API names')
    names_p.add_argument('--namespace', choices=[ns.value for ns in Namespace])
    names_p.add_argument('--registry', action='append', metavar='FILE',
                         help='Extra registry data file (repeatable)')
    names_p.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    names_p.set_defaults(func=cmd_names)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(args)
    except (ConfigError, RegistryError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR


if __name__ == '__main__':
    sys.exit(main())
