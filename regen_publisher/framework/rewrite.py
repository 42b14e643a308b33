"""Reference rewriting for split artifacts.

Rules are compiled into a single alternation ordered longest pattern first and
applied in one pass. Two consequences:

- when one pattern is a prefix of another (``OrderBaseExample`` / ``OrderBase``)
  the longer one always wins, whatever order the rules were listed in;
- text produced by one replacement is never rescanned by another rule.

Identity rules are legal and pin a span so no shorter rule can touch it.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable

logger = logging.getLogger(__name__)

# Unicode-aware identifier character class.
_IDENT_CLASS = r"[\w$]"
_IDENT_RE = re.compile(_IDENT_CLASS)


def _is_ident_char(ch: str) -> bool:
    return _IDENT_RE.fullmatch(ch) is not None


@dataclass(frozen=True)
class RewriteRule:
    pattern: str
    replacement: str
    whole_word: bool = True

    def __post_init__(self) -> None:
        if not isinstance(self.pattern, str) or not self.pattern:
            raise ValueError("Rewrite rule pattern must be a non-empty string")
        if not isinstance(self.replacement, str):
            raise TypeError(
                f"Rewrite rule replacement must be a string (type={type(self.replacement).__name__})"
            )

    def to_regex(self) -> str:
        text = re.escape(self.pattern)
        if not self.whole_word:
            return text
        # Boundaries only make sense on the ends that are identifier characters.
        if _is_ident_char(self.pattern[0]):
            text = f"(?<!{_IDENT_CLASS})" + text
        if _is_ident_char(self.pattern[-1]):
            text = text + f"(?!{_IDENT_CLASS})"
        return text


class ReferenceRewriter:
    def __init__(self, rules: Iterable[RewriteRule]):
        by_pattern: dict[str, RewriteRule] = {}
        for rule in rules:
            existing = by_pattern.get(rule.pattern)
            if existing is not None:
                if existing != rule:
                    raise ValueError(
                        f"Conflicting rewrite rules for {rule.pattern!r}: "
                        f"{existing.replacement!r} vs {rule.replacement!r}"
                    )
                continue
            by_pattern[rule.pattern] = rule

        self.rules: tuple[RewriteRule, ...] = tuple(
            sorted(by_pattern.values(), key=lambda r: len(r.pattern), reverse=True)
        )
        self._replacements = {rule.pattern: rule.replacement for rule in self.rules}
        self._regex = (
            re.compile("|".join(rule.to_regex() for rule in self.rules)) if self.rules else None
        )

    def apply(self, text: str) -> str:
        if self._regex is None:
            return text
        result, count = self._regex.subn(lambda m: self._replacements[m.group(0)], text)
        logger.debug("Rewrote %d reference(s) using %d rule(s)", count, len(self.rules))
        return result


def model_rules(model_name: str, base_name: str) -> list[RewriteRule]:
    """Rename the declared type (and its constructors) of a model class."""

    rules = [
        RewriteRule(f"class {model_name}", f"class {base_name}"),
    ]
    for modifier in ("public", "protected", "private"):
        rules.append(RewriteRule(f"{modifier} {model_name}(", f"{modifier} {base_name}("))
    return rules


@dataclass(frozen=True)
class ModelMove:
    """A model type that the split moved from ``namespace`` to ``target_namespace``."""

    namespace: str
    name: str
    target_namespace: str


def _model_move_rules(models: Iterable[ModelMove]) -> list[RewriteRule]:
    rules: list[RewriteRule] = []
    for move in models:
        # The criteria type is never split, so it stays where it was generated.
        example = f"{move.namespace}.{move.name}Example"
        rules.append(RewriteRule(example, example))
        rules.append(
            RewriteRule(f"{move.namespace}.{move.name}", f"{move.target_namespace}.{move.name}")
        )
    return rules


def mapper_rules(
    *,
    mapper_name: str,
    mapper_base_name: str,
    mapper_namespace: str,
    models: Iterable[ModelMove] = (),
) -> list[RewriteRule]:
    """
    Rename the persistence interface to its base name and point every model
    import at the extension model that replaced it.
    """

    rules = [
        RewriteRule(f"{mapper_namespace}.{mapper_name}", f"{mapper_namespace}.{mapper_base_name}"),
        RewriteRule(mapper_name, mapper_base_name),
    ]
    rules.extend(_model_move_rules(models))
    return rules


def descriptor_rules(
    *,
    mapper_name: str,
    mapper_namespace: str,
    mapper_target_namespace: str,
    models: Iterable[ModelMove] = (),
) -> list[RewriteRule]:
    rules = [
        RewriteRule(
            f"{mapper_namespace}.{mapper_name}",
            f"{mapper_target_namespace}.{mapper_name}",
        ),
    ]
    rules.extend(_model_move_rules(models))
    return rules
