"""
Recover the local names the LSP function uses for `pathToFileURL` and the
`path` module, and classify how it currently builds file URIs.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field

from anchor_locator import IDENT
from boundary_resolver import FunctionRecord

ROLE_URL_CONVERTER = "pathToFileURL"
ROLE_PATH_MODULE = "path"
REQUIRED_ROLES = (ROLE_PATH_MODULE, ROLE_URL_CONVERTER)

URL_IMPORT = re.compile(r"""import\s*\{([^}]*)\}\s*from\s*["'](?:node:)?url["']""")
IMPORT_SPECIFIER = re.compile(rf"^({IDENT})(?:\s+as\s+({IDENT}))?$")
PATH_RESOLVE_CALL = re.compile(rf"({IDENT})\.resolve\(")

# `file://${ag.resolve(H)}`
LEGACY_URI = re.compile(rf"`file:\/\/\$\{{({IDENT})\.resolve\([^)]+\)\}}`")
# C35(ag.resolve(H)).href
TARGET_URI = re.compile(rf"{IDENT}\(({IDENT})\.resolve\([^)]+\)\)\.href")


class UriShape(enum.Enum):
    LEGACY = "legacy"
    TARGET = "target"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class AliasMap:
    aliases: dict[str, str] = field(default_factory=dict)
    shape: UriShape = UriShape.UNRECOGNIZED

    def get(self, role: str) -> str | None:
        return self.aliases.get(role)

    @property
    def needs_patching(self) -> bool:
        return self.shape is UriShape.LEGACY

    def missing_roles(self) -> list[str]:
        return [role for role in REQUIRED_ROLES if not self.aliases.get(role)]


def find_url_converter_alias(source: str) -> str | None:
    for match in URL_IMPORT.finditer(source):
        for specifier in match.group(1).split(","):
            parsed = IMPORT_SPECIFIER.match(specifier.strip())
            if parsed and parsed.group(1) == "pathToFileURL":
                return parsed.group(2) or parsed.group(1)
    return None


def find_path_alias(code: str) -> str | None:
    # The URI templates name the path module directly; any other `.resolve(`
    # (Promise.resolve, ...) is only a fallback.
    for pattern in (LEGACY_URI, TARGET_URI, PATH_RESOLVE_CALL):
        match = pattern.search(code)
        if match:
            return match.group(1)
    return None


def classify_uri_shape(code: str) -> UriShape:
    if LEGACY_URI.search(code):
        return UriShape.LEGACY
    if TARGET_URI.search(code):
        return UriShape.TARGET
    return UriShape.UNRECOGNIZED


def extract_aliases(source: str, function: FunctionRecord) -> AliasMap:
    aliases: dict[str, str] = {}

    converter = find_url_converter_alias(source)
    if converter:
        aliases[ROLE_URL_CONVERTER] = converter

    path_alias = find_path_alias(function.code)
    if path_alias:
        aliases[ROLE_PATH_MODULE] = path_alias

    return AliasMap(aliases=aliases, shape=classify_uri_shape(function.code))
