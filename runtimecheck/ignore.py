"""
RuntimeCheck Ignore Filter — Drop findings the user chose to ignore.

Matching is exact and case-sensitive on the decorated name ("fs.exists",
"Buffer()", "new Buffer()"); there is no prefix or wildcard matching.
Global findings are checked against the global ignore set, module findings
against the module ignore set.
"""

from runtimecheck.paths import AccessPath, Namespace, OperationKind, display_name


def ignore_key(path: AccessPath, kind: OperationKind) -> str:
    return display_name(path, kind)


def is_ignored(namespace: Namespace, path: AccessPath, kind: OperationKind, options) -> bool:
    """Check a normalized path against the ignore set for its namespace.

    Args:
        options: A ParsedOptions instance (anything with the two ignore sets).
    """
    if namespace is Namespace.GLOBALS:
        ignored = options.ignored_global_names
    else:
        ignored = options.ignored_module_names
    return ignore_key(path, kind) in ignored
