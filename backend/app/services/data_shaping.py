"""
Library API — Data Shaping (Sparse Fieldsets)
===============================================

What:  Projects an object onto the client-requested subset of its fields.
How:   Resolves the shape's declared fields in declaration order, matches
       requested tokens case-insensitively, and copies values into an ordered
       dict under the declared field name.
Who:   Author routes call type_has_properties() to validate `fields`, then
       shape()/shape_many() to build the wire projection.

Declared fields are discovered, in order of preference, from:
    1. `__shape_fields__`: an explicit ordered tuple of public field names
    2. pydantic models: `model_fields` (alias wins over attribute name)
    3. dataclasses: `dataclasses.fields()`
    4. mappings (instances only): key order, which lets an already-shaped
       entity be shaped again with the same result

The identity field is always part of a projection when the shape declares
one, even if the client left it out. Link building and client caches
depend on it.
"""

import dataclasses
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import BaseModel

from app.exceptions import FieldNotFoundError

ShapedEntity = Dict[str, Any]


def split_fields(fields: Optional[str]) -> List[str]:
    """Comma-separated field list → trimmed, non-empty tokens."""
    if not fields:
        return []
    return [token.strip() for token in fields.split(",") if token.strip()]


def _shape_name(shape: Any) -> str:
    cls = shape if isinstance(shape, type) else type(shape)
    return cls.__name__


def _declared_fields(shape: Any) -> Dict[str, str]:
    """Declared wire name → attribute (or key) name, in declaration order."""
    explicit = getattr(shape, "__shape_fields__", None)
    if explicit is not None:
        return {name: name for name in explicit}

    cls = shape if isinstance(shape, type) else type(shape)
    if issubclass(cls, BaseModel):
        return {(info.alias or name): name for name, info in cls.model_fields.items()}
    if dataclasses.is_dataclass(cls):
        return {f.name: f.name for f in dataclasses.fields(cls)}
    if isinstance(shape, Mapping):
        return {str(key): key for key in shape.keys()}
    raise TypeError(f"{cls.__name__} does not declare shapeable fields")


class ResourceShaper:
    """
    Stateless projector for sparse fieldsets.

    Args:
        identity_field: Field always kept in a projection (matched
            case-insensitively against the shape's declared fields).
    """

    def __init__(self, identity_field: str = "id"):
        self.identity_field = identity_field

    def shape(self, source: Any, fields: Optional[str] = None) -> ShapedEntity:
        """
        Project `source` onto the requested fields.

        With no fields requested every declared field is included in
        declaration order. Otherwise the identity field comes first,
        followed by the requested fields in request order (each once).

        Raises:
            FieldNotFoundError: a requested token matches no declared field.
        """
        declared = _declared_fields(source)
        tokens = split_fields(fields)
        if not tokens:
            return {name: self._value(source, attr) for name, attr in declared.items()}

        lookup = {name.lower(): name for name in declared}
        selected: List[str] = []
        identity = lookup.get(self.identity_field.lower())
        if identity is not None:
            selected.append(identity)
        for token in tokens:
            name = lookup.get(token.lower())
            if name is None:
                raise FieldNotFoundError(token, shape=_shape_name(source))
            if name not in selected:
                selected.append(name)
        return {name: self._value(source, declared[name]) for name in selected}

    def shape_many(self, sources: Iterable[Any], fields: Optional[str] = None) -> List[ShapedEntity]:
        return [self.shape(source, fields) for source in sources]

    def type_has_properties(self, shape: Any, fields: Optional[str] = None) -> bool:
        """True if every requested token names a declared field of `shape`."""
        tokens = split_fields(fields)
        if not tokens:
            return True
        lookup = {name.lower() for name in _declared_fields(shape)}
        return all(token.lower() in lookup for token in tokens)

    @staticmethod
    def _value(source: Any, attr: Any) -> Any:
        if isinstance(source, Mapping):
            return source[attr]
        return getattr(source, attr)


# ── Singleton Instance ────────────────────────────────────────────────────
resource_shaper = ResourceShaper()
