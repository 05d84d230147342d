"""Route patterns and path matching.

A pattern is the route path split on ``/``. Segments starting with
``:`` are named parameters that bind the corresponding request segment
verbatim; every other segment must match exactly::

    match("/post/:id/custom", "/post/42/custom")  # {"id": "42"}
    match("/post/:id/custom", "/post/42/other")   # None
    match("/a/:b", "/a")                          # None (segment count)

Splitting is literal: leading, trailing, and doubled slashes produce
empty segments, so ``/a/`` never matches ``/a``.
"""

from dataclasses import dataclass
from functools import lru_cache

from switchyard.errors import DuplicateParameterName


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route pattern.

    Literal:  ``users``  (is_param=False)
    Param:    ``:id``    (is_param=True, param_name="id")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None


@dataclass(frozen=True, slots=True)
class RoutePattern:
    """An immutable, pre-split route pattern.

    Duplicate parameter names are recorded, not rejected, at parse time;
    ``match`` raises when a path of the right length walks up to the
    repeated name, so the defect surfaces on the first request that
    exercises the pattern.
    """

    path: str
    segments: tuple[PathSegment, ...]
    duplicate_param: str | None = None

    @classmethod
    def parse(cls, path: str) -> "RoutePattern":
        segments: list[PathSegment] = []
        seen: set[str] = set()
        duplicate: str | None = None
        for part in path.split("/"):
            if part.startswith(":"):
                name = part[1:]
                if name in seen and duplicate is None:
                    duplicate = name
                seen.add(name)
                segments.append(PathSegment(value=part, is_param=True, param_name=name))
            else:
                segments.append(PathSegment(value=part))
        return cls(path=path, segments=tuple(segments), duplicate_param=duplicate)

    @property
    def param_names(self) -> tuple[str, ...]:
        return tuple(seg.param_name for seg in self.segments if seg.param_name is not None)

    @property
    def is_dynamic(self) -> bool:
        return any(seg.is_param for seg in self.segments)

    def match(self, path: str) -> dict[str, str] | None:
        """Return the bound parameters if *path* matches, else ``None``.

        Raises ``DuplicateParameterName`` on reaching a repeated
        parameter name. A path with a different segment count, or one
        that fails a literal segment first, is simply ``None``.
        """
        parts = path.split("/")
        if len(parts) != len(self.segments):
            return None

        params: dict[str, str] = {}
        for segment, part in zip(self.segments, parts, strict=True):
            if segment.is_param:
                name = segment.param_name or ""
                if name in params:
                    raise DuplicateParameterName(name, self.path)
                params[name] = part
            elif segment.value != part:
                return None
        return params


@lru_cache(maxsize=512)
def compile_pattern(path: str) -> RoutePattern:
    """Parse *path* into a cached ``RoutePattern``."""
    return RoutePattern.parse(path)


def match(pattern: str | RoutePattern, path: str) -> dict[str, str] | None:
    """Match a request *path* against a route *pattern*.

    Returns the parameter bindings, or ``None`` for no match.
    Raises ``DuplicateParameterName`` for a pattern that repeats a
    parameter name.
    """
    if isinstance(pattern, str):
        pattern = compile_pattern(pattern)
    return pattern.match(path)
