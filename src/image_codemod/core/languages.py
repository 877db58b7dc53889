from pathlib import Path

_EXTENSION_DIALECT_MAP = {
    ".cjs": "javascript",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".ts": "typescript",
    ".tsx": "tsx",
}

# Plain ``.ts`` sources are retried with the TSX grammar, which also accepts JSX.
_DIALECT_FALLBACKS = {
    "javascript": ("javascript",),
    "typescript": ("typescript", "tsx"),
    "tsx": ("tsx",),
}

SUPPORTED_EXTENSIONS: frozenset[str] = frozenset(_EXTENSION_DIALECT_MAP)


def detect_dialect_from_path(file_path: Path) -> str:
    suffix = file_path.suffix.lower()
    if suffix in _EXTENSION_DIALECT_MAP:
        return _EXTENSION_DIALECT_MAP[suffix]
    raise ValueError(f"Unsupported file extension: {suffix or '<none>'}")


def dialect_candidates(dialect: str) -> tuple[str, ...]:
    return _DIALECT_FALLBACKS.get(dialect, (dialect,))


def is_supported_file(path: Path, extensions: frozenset[str] = SUPPORTED_EXTENSIONS) -> bool:
    return path.suffix.lower() in extensions
