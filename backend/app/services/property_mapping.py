"""
Library API — Property Mapping Registry
=========================================

What:  Translates client-facing sort keys ("Name", "Age") into one or more
       storage fields, each flagged for sort-direction reversal.
How:   One PropertyMapping per (source shape, destination shape) pair, held
       in a registry keyed by a stable pair of shape tags.
Who:   Routes validate `orderBy` with is_valid_sort_expression(); services
       call resolve_sort_expression() to get storage-level instructions.
When:  The registry singleton is populated and frozen at import time, before
       the first request is served. It is read-only afterwards.

Sort expression grammar:
    expression := clause ("," clause)*
    clause     := key [ "asc" | "desc" ]      (case-insensitive, trimmed)

    "Name"           → first_name ASC, last_name ASC
    "Age desc"       → date_of_birth ASC   (Age reverts DateOfBirth)
    "genre, age"     → genre ASC, date_of_birth DESC

Empty clauses ("name,,genre") are skipped; an empty expression means
"no explicit sort".
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from app.exceptions import ConfigurationError, ValidationError
from app.models.author import Author
from app.schemas.author import AuthorDto

logger = logging.getLogger(__name__)

_DIRECTIONS = {"asc": False, "desc": True}


def _shape_tag(shape: Any) -> str:
    """Stable tag for a shape: class name for types, str() for anything else."""
    if isinstance(shape, type):
        return shape.__name__
    return str(shape)


@dataclass(frozen=True)
class PropertyMappingValue:
    """
    A client sort key's storage fields.

    Attributes:
        destination_fields: Storage fields, sorted together in this order.
        revert: Sort the storage fields opposite to the requested direction
                (e.g. "age" ascending is date_of_birth descending).
    """

    destination_fields: Tuple[str, ...]
    revert: bool = False

    def __post_init__(self) -> None:
        # Accept any sequence from callers but store an immutable tuple
        object.__setattr__(self, "destination_fields", tuple(self.destination_fields))
        if not self.destination_fields:
            raise ConfigurationError(
                message="A property mapping value needs at least one destination field",
            )


@dataclass(frozen=True)
class SortInstruction:
    """One storage-level ordering step produced from a sort expression."""

    field: str
    descending: bool = False
    revert: bool = False

    @property
    def effective_descending(self) -> bool:
        """Direction to apply to storage after honouring the revert flag."""
        return self.descending != self.revert


class PropertyMapping:
    """
    Case-insensitive sort-key table for one (source, destination) shape pair.
    """

    def __init__(
        self,
        source_shape: Any,
        destination_shape: Any,
        entries: Mapping[str, PropertyMappingValue],
    ):
        self.source_shape = _shape_tag(source_shape)
        self.destination_shape = _shape_tag(destination_shape)
        self._entries: Dict[str, Tuple[str, PropertyMappingValue]] = {}
        for key, value in entries.items():
            folded = key.strip().lower()
            if folded in self._entries:
                raise ConfigurationError(
                    message=f"Sort key '{key}' is declared twice",
                    context={"source": self.source_shape, "destination": self.destination_shape},
                )
            self._entries[folded] = (key, value)

    @property
    def pair(self) -> Tuple[str, str]:
        return self.source_shape, self.destination_shape

    def get(self, key: str) -> Optional[PropertyMappingValue]:
        entry = self._entries.get(key.strip().lower())
        return entry[1] if entry else None

    def keys(self) -> List[str]:
        """Sort keys with their declared casing, in declaration order."""
        return [key for key, _ in self._entries.values()]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.strip().lower() in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"<PropertyMapping({self.source_shape} -> {self.destination_shape}, keys={self.keys()})>"


def _parse_clause(clause: str) -> Optional[Tuple[str, bool]]:
    """Split one trimmed clause into (key, descending); None if malformed."""
    tokens = clause.split()
    if len(tokens) == 1:
        return tokens[0], False
    if len(tokens) == 2 and tokens[1].lower() in _DIRECTIONS:
        return tokens[0], _DIRECTIONS[tokens[1].lower()]
    return None


def _clauses(expression: Optional[str]) -> List[str]:
    if not expression:
        return []
    return [clause.strip() for clause in expression.split(",") if clause.strip()]


class PropertyMappingRegistry:
    """
    Holds at most one PropertyMapping per shape pair.

    Lifecycle:
        register(...) calls happen during startup, then freeze() ends the
        registration phase. Concurrent readers need no locking because no
        writer runs after that point.
    """

    def __init__(self) -> None:
        self._mappings: Dict[Tuple[str, str], List[PropertyMapping]] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        self._frozen = True

    def register(
        self,
        source_shape: Any,
        destination_shape: Any,
        mapping: PropertyMapping,
    ) -> None:
        """
        Add the mapping for a shape pair.

        Raises:
            ConfigurationError: the pair is already registered, the mapping
                was built for another pair, or the registry is frozen.
        """
        pair = (_shape_tag(source_shape), _shape_tag(destination_shape))
        if self._frozen:
            raise ConfigurationError(
                message="Property mappings cannot be registered after startup",
                context={"pair": pair},
            )
        if mapping.pair != pair:
            raise ConfigurationError(
                message=f"Mapping for {mapping.pair} registered under {pair}",
                context={"pair": pair},
            )
        if self._mappings.get(pair):
            raise ConfigurationError(
                message=f"A property mapping for <{pair[0]}, {pair[1]}> is already registered",
                context={"pair": pair},
            )
        self._mappings.setdefault(pair, []).append(mapping)
        logger.debug("Registered property mapping %s -> %s (%d keys)", pair[0], pair[1], len(mapping))

    def get_mapping(self, source_shape: Any, destination_shape: Any) -> PropertyMapping:
        """
        Exact single-match lookup.

        Raises:
            ConfigurationError: zero or several mappings exist for the pair.
        """
        pair = (_shape_tag(source_shape), _shape_tag(destination_shape))
        matches = self._mappings.get(pair, [])
        if len(matches) != 1:
            raise ConfigurationError(
                message=f"Cannot find exact property mapping instance for <{pair[0]}, {pair[1]}>",
                context={"pair": pair, "matches": len(matches)},
            )
        return matches[0]

    def is_valid_sort_expression(
        self,
        source_shape: Any,
        destination_shape: Any,
        expression: Optional[str],
    ) -> bool:
        """
        Check that every clause of a sort expression names a mapped key.

        Returns False on the first unknown key or malformed clause; callers
        answer 400 in that case. An empty expression is valid.
        """
        clauses = _clauses(expression)
        if not clauses:
            return True
        mapping = self.get_mapping(source_shape, destination_shape)
        for clause in clauses:
            parsed = _parse_clause(clause)
            if parsed is None or parsed[0] not in mapping:
                logger.info("Rejected sort clause '%s' for %s", clause, mapping.source_shape)
                return False
        return True

    def resolve_sort_expression(
        self,
        source_shape: Any,
        destination_shape: Any,
        expression: Optional[str],
    ) -> List[SortInstruction]:
        """
        Expand a sort expression into storage-level instructions.

        Raises:
            ValidationError: a clause is malformed or names an unmapped key.
        """
        clauses = _clauses(expression)
        if not clauses:
            return []
        mapping = self.get_mapping(source_shape, destination_shape)
        instructions: List[SortInstruction] = []
        for clause in clauses:
            parsed = _parse_clause(clause)
            if parsed is None:
                raise ValidationError(message=f"Malformed sort clause '{clause}'", field="orderBy")
            key, descending = parsed
            value = mapping.get(key)
            if value is None:
                raise ValidationError(
                    message=f"Key mapping for '{key}' is missing",
                    field="orderBy",
                    context={"supported": mapping.keys()},
                )
            instructions.extend(
                SortInstruction(field=name, descending=descending, revert=value.revert)
                for name in value.destination_fields
            )
        return instructions


def _author_mapping() -> PropertyMapping:
    return PropertyMapping(
        AuthorDto,
        Author,
        {
            "Id": PropertyMappingValue(("id",)),
            "Genre": PropertyMappingValue(("genre",)),
            "Age": PropertyMappingValue(("date_of_birth",), revert=True),
            "Name": PropertyMappingValue(("first_name", "last_name")),
        },
    )


def build_property_mapping_registry(
    extra: Sequence[PropertyMapping] = (),
) -> PropertyMappingRegistry:
    """Create and freeze the application's registry."""
    registry = PropertyMappingRegistry()
    for mapping in (_author_mapping(), *extra):
        registry.register(mapping.source_shape, mapping.destination_shape, mapping)
    registry.freeze()
    return registry


# ── Singleton Instance ────────────────────────────────────────────────────
property_mapping_registry = build_property_mapping_registry()
