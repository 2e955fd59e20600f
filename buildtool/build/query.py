"""
Structured queries over information about the current build.
"""
import re
import yaml
from collections.abc import Mapping
from typing import Any, Dict, List, Sequence

from ..config.env_context import EnvContext
from ..core.errors import (
    SelectorIndexOutOfRangeError, SelectorNotFoundError, SelectorTypeMismatchError
)
from ..core.models import version_string

_INDEX_RE = re.compile(r"[0-9]+")

GLOBAL_HINTS_KEY = "global-hints"
GLOBAL_HINTS_LINE = f"\n{GLOBAL_HINTS_KEY}:\n"
GLOBAL_HINTS_COMMENT = (
    "# Note: global-hints is experimental and may be renamed / removed in the future."
)


def select(value: Any, selectors: Sequence[str]) -> Any:
    """
    Walk a nested document one selector at a time.

    Mappings are indexed by key, sequences by a non-negative decimal index.
    Errors report the selectors consumed so far, including the failing one.
    """
    consumed: List[str] = []
    for selector in selectors:
        consumed.append(selector)
        if isinstance(value, Mapping):
            if selector not in value:
                raise SelectorNotFoundError(consumed)
            value = value[selector]
        elif isinstance(value, (list, tuple)):
            if not _INDEX_RE.fullmatch(selector):
                raise SelectorTypeMismatchError(
                    "Encountered array and needed numeric selector", consumed
                )
            index = int(selector)
            if index >= len(value):
                raise SelectorIndexOutOfRangeError(consumed)
            value = value[index]
        else:
            raise SelectorTypeMismatchError(
                f"Cannot apply selector to {value!r}", consumed
            )
    return value


def raw_build_info(ctx: EnvContext) -> Dict[str, Any]:
    """Build information document for the current project"""
    info: Dict[str, Any] = {
        "locals": {
            lp.name: {
                "version": version_string(lp.package.version),
                "path": str(lp.directory),
            }
            for lp in ctx.locals
        },
        "compiler": {
            "wanted": ctx.wanted_compiler,
            "actual": ctx.actual_compiler,
        },
    }
    if ctx.config.global_hints is not None:
        info[GLOBAL_HINTS_KEY] = dict(ctx.config.global_hints)
    return info


def encode_yaml(value: Any) -> str:
    text = yaml.safe_dump(value, default_flow_style=False, sort_keys=True)
    # Scalars are dumped with an explicit document end marker
    if text.endswith("\n...\n"):
        text = text[:-len("...\n")]
    return text


def add_global_hints_comment(text: str, selectors: Sequence[str]) -> str:
    """
    Mark the global-hints block as experimental.

    With no selectors the comment goes right above the block. When the query
    selects into global-hints it is appended, so the first line of output
    stays the selected value.
    """
    if not selectors:
        return text.replace(
            GLOBAL_HINTS_LINE, f"\n{GLOBAL_HINTS_COMMENT}{GLOBAL_HINTS_LINE}"
        )
    if selectors[0] == GLOBAL_HINTS_KEY:
        return f"{text}\n{GLOBAL_HINTS_COMMENT}"
    return text


def query_build_info(ctx: EnvContext, selectors: Sequence[str]) -> str:
    """Select part of the build information and render it as YAML"""
    selectors = list(selectors)
    value = select(raw_build_info(ctx), selectors)
    return add_global_hints_comment(encode_yaml(value), selectors)
