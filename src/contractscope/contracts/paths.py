"""
Route-template normalization and pattern compilation.

Backend frameworks spell path parameters differently:

    /api/users/:id      Express, Gin, Echo
    /api/users/{id}     FastAPI, OpenAPI, gorilla/mux
    /api/users/<id>     Flask

All of them are normalized to the colon form before matching. A parameter
always stands for exactly one non-slash path segment.
"""

import re

PARAM_NAME = r"[A-Za-z_][A-Za-z0-9_]*"

_PARAM_BRACE = re.compile(rf"\{{({PARAM_NAME})\}}")
_PARAM_ANGLE = re.compile(rf"<({PARAM_NAME})>")
_PARAM_ANY = re.compile(rf":({PARAM_NAME})|\{{({PARAM_NAME})\}}|<({PARAM_NAME})>")

SEGMENT_WILDCARD = "[^/]+"


def normalize_path(path: str) -> str:
    """
    Normalize a route template or call URL into canonical form.

    Examples:
        >>> normalize_path("api/users/{id}/")
        '/api/users/:id'
        >>> normalize_path("/api/users/<id>")
        '/api/users/:id'
        >>> normalize_path("/")
        '/'
    """
    p = path or ""

    # trimming can expose more whitespace or slashes ("/a/ /"), repeat until stable
    previous = None
    while p != previous:
        previous = p
        p = _PARAM_BRACE.sub(r":\1", p)     # {id} -> :id
        p = _PARAM_ANGLE.sub(r":\1", p)     # <id> -> :id
        # exactly one leading slash, no trailing slash except for "/"
        p = "/" + p.strip().strip("/")
    return p


def path_to_pattern(path: str) -> str:
    """
    Convert a route template to an anchored regular expression.

    Placeholders become a single-segment wildcard; everything else is
    matched literally.

    Example:
        >>> path_to_pattern("/api/users/:id")
        '^/api/users/[^/]+$'
    """
    parts: list[str] = []
    last = 0
    for m in _PARAM_ANY.finditer(path):
        parts.append(re.escape(path[last:m.start()]))
        parts.append(SEGMENT_WILDCARD)
        last = m.end()
    parts.append(re.escape(path[last:]))
    return "^" + "".join(parts) + "$"


def compile_path(path: str) -> re.Pattern[str]:
    """Compile a route template into a matchable pattern."""
    return re.compile(path_to_pattern(path))


def extract_path_params(path: str) -> list[str]:
    """
    Parameter names of a route template, in declaration order.

    Example:
        >>> extract_path_params("/api/users/:userId/posts/{postId}")
        ['userId', 'postId']
    """
    return [next(g for g in m.groups() if g) for m in _PARAM_ANY.finditer(path)]


def is_param_segment(segment: str) -> bool:
    """True if a path segment starts with a parameter placeholder."""
    return bool(_PARAM_ANY.match(segment))


def split_segments(path: str) -> list[str]:
    """Split a path on "/" keeping the leading empty segment."""
    return path.split("/")
