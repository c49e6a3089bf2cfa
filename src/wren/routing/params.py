"""Path parameter converters for route segments like ``{id:int}``."""

# (regex_pattern, python_type) for each supported converter; the router
# applies python_type to the matched text before the handler sees it
CONVERTERS: dict[str, tuple[str, type]] = {
    "str": (r"[^/]+", str),
    "int": (r"\d+", int),
    "float": (r"\d+(?:\.\d+)?", float),
    "path": (r".+", str),
}
