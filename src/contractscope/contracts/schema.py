"""
Language-agnostic type schemas and their structural comparison.

A TypeSchema is a small JSON-Schema-like tree describing the shape of a
request or response body. Backend and frontend schemas are compared with
the backend as the source of truth:

    backend = object_schema({"id": primitive_schema("string")}, required=["id"])
    frontend = object_schema({"id": primitive_schema("integer")})
    compare(backend, frontend)  # -> [FieldMismatch(type_mismatch at "$.id")]

Schemas are treated as immutable once built. Use clone() before mutating a
schema that may be shared.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Optional

from contractscope.shared.domain.exceptions import InvalidSchemaError
from contractscope.shared.utils.ids import generate_id

ROOT_PATH = "$"


class SchemaType(str, Enum):
    """Kind of a schema node."""

    OBJECT = "object"
    ARRAY = "array"
    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    NULL = "null"
    ANY = "any"
    UNKNOWN = "unknown"


class MismatchType(str, Enum):
    """Classification of a structural divergence between backend and frontend."""

    MISSING_IN_FRONTEND = "missing_in_frontend"  # Backend sends, frontend ignores
    MISSING_IN_BACKEND = "missing_in_backend"  # Frontend expects, backend doesn't send
    TYPE_MISMATCH = "type_mismatch"
    OPTIONALITY_MISMATCH = "optionality_mismatch"
    NULLABILITY_MISMATCH = "nullability_mismatch"


class MismatchSeverity(str, Enum):
    """Severity of a mismatch."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


_NUMERIC = {SchemaType.NUMBER, SchemaType.INTEGER}


@dataclass
class FieldMismatch:
    """
    A mismatch between backend and frontend at one field path.

    Paths are rooted at "$" and use "." for properties and "[]" for array
    items, e.g. "$.user.email" or "$.items[].id".
    """

    field_path: str
    mismatch_type: MismatchType
    severity: MismatchSeverity
    description: str
    backend_type: str = ""
    frontend_type: str = ""
    id: str = field(default_factory=lambda: generate_id("mis"))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON/YAML serialization."""
        return {
            "id": self.id,
            "field_path": self.field_path,
            "type": self.mismatch_type.value,
            "severity": self.severity.value,
            "description": self.description,
            "backend_type": self.backend_type,
            "frontend_type": self.frontend_type,
        }


@dataclass
class TypeSchema:
    """
    A node in a type schema tree.

    Invariants (checked on construction):
        - properties/required only on object kinds
        - items only on array kinds
        - every required name has a property
    """

    kind: SchemaType
    properties: dict[str, "TypeSchema"] = field(default_factory=dict)
    required: set[str] = field(default_factory=set)
    items: Optional["TypeSchema"] = None
    nullable: bool = False
    format: str | None = None
    enum: list[str] = field(default_factory=list)
    ref: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.kind, SchemaType):
            try:
                self.kind = SchemaType(str(self.kind).lower())
            except ValueError:
                valid = ", ".join(t.value for t in SchemaType)
                raise InvalidSchemaError(
                    f"Unknown schema type '{self.kind}'. Valid options: {valid}",
                    context={"kind": self.kind},
                )

        self.required = set(self.required)

        if self.kind != SchemaType.OBJECT and (self.properties or self.required):
            raise InvalidSchemaError(
                f"Only object schemas can declare properties (got {self.kind.value})",
                context={"kind": self.kind.value},
            )
        if self.kind != SchemaType.ARRAY and self.items is not None:
            raise InvalidSchemaError(
                f"Only array schemas can declare items (got {self.kind.value})",
                context={"kind": self.kind.value},
            )

        dangling = self.required - set(self.properties)
        if dangling:
            raise InvalidSchemaError(
                f"Required names without a property: {', '.join(sorted(dangling))}",
                context={"required": sorted(dangling)},
            )

    def add_property(self, name: str, schema: "TypeSchema", required: bool = False) -> None:
        """Add a property to an object schema."""
        if self.kind != SchemaType.OBJECT:
            raise InvalidSchemaError(
                f"Cannot add property '{name}' to a {self.kind.value} schema",
                context={"kind": self.kind.value, "property": name},
            )
        self.properties[name] = schema
        if required:
            self.required.add(name)

    def is_required(self, name: str) -> bool:
        """Check if a property is required."""
        return name in self.required

    def clone(self) -> "TypeSchema":
        """Deep copy; the clone shares no mutable state with this schema."""
        return TypeSchema(
            kind=self.kind,
            properties={name: prop.clone() for name, prop in self.properties.items()},
            required=set(self.required),
            items=self.items.clone() if self.items is not None else None,
            nullable=self.nullable,
            format=self.format,
            enum=list(self.enum),
            ref=self.ref,
        )

    def compare(self, other: Optional["TypeSchema"], path: str = "") -> list[FieldMismatch]:
        """Compare this (backend) schema against a frontend schema."""
        return compare(self, other, path)

    def __str__(self) -> str:
        return describe(self)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-Schema-like dictionary."""
        result: dict[str, Any] = {"type": self.kind.value}
        if self.properties:
            result["properties"] = {name: prop.to_dict() for name, prop in self.properties.items()}
        if self.required:
            result["required"] = sorted(self.required)
        if self.items is not None:
            result["items"] = self.items.to_dict()
        if self.nullable:
            result["nullable"] = True
        if self.enum:
            result["enum"] = list(self.enum)
        if self.format:
            result["format"] = self.format
        if self.ref:
            result["$ref"] = self.ref
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TypeSchema":
        """
        Create from a JSON-Schema-like dictionary.

        Raises:
            InvalidSchemaError: If the data is not a mapping or breaks an invariant
        """
        if not isinstance(data, dict):
            raise InvalidSchemaError(
                f"Schema must be a mapping, got {type(data).__name__}",
                context={"value": repr(data)[:80]},
            )

        kind = data.get("type", data.get("kind", SchemaType.UNKNOWN.value))
        raw_properties = _expect(data, "properties", dict, {})
        properties = {name: cls.from_dict(prop) for name, prop in raw_properties.items()}
        items = data.get("items")

        return cls(
            kind=kind,
            properties=properties,
            required=set(_expect(data, "required", list, [])),
            items=cls.from_dict(items) if items is not None else None,
            nullable=_expect(data, "nullable", bool, False),
            format=data.get("format"),
            enum=[str(v) for v in _expect(data, "enum", list, [])],
            ref=data.get("$ref", data.get("ref")),
        )


def _expect(data: dict[str, Any], key: str, expected: type, default: Any) -> Any:
    """Read an optional schema keyword, rejecting values of the wrong JSON type."""
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, expected):
        raise InvalidSchemaError(
            f"Schema keyword '{key}' must be a {_JSON_TYPE_NAMES[expected]}, got {type(value).__name__}",
            context={"keyword": key, "value": repr(value)[:80]},
        )
    return value


_JSON_TYPE_NAMES = {dict: "mapping", list: "list", bool: "boolean"}


def object_schema(
    properties: dict[str, TypeSchema] | None = None,
    required: Iterable[str] = (),
    nullable: bool = False,
) -> TypeSchema:
    """Create an object schema."""
    return TypeSchema(
        kind=SchemaType.OBJECT,
        properties=dict(properties or {}),
        required=set(required),
        nullable=nullable,
    )


def array_schema(items: TypeSchema | None, nullable: bool = False) -> TypeSchema:
    """Create an array schema with an item type."""
    return TypeSchema(kind=SchemaType.ARRAY, items=items, nullable=nullable)


def primitive_schema(
    kind: SchemaType | str,
    nullable: bool = False,
    format: str | None = None,
) -> TypeSchema:
    """Create a schema for a primitive type."""
    return TypeSchema(kind=kind, nullable=nullable, format=format)


def describe(schema: TypeSchema | None) -> str:
    """
    Human-readable type string.

    Examples:
        object{email,id}, array<string>, string?(date-time), unknown
    """
    if schema is None:
        return "unknown"

    if schema.kind == SchemaType.OBJECT:
        if not schema.properties:
            return "object"
        return f"object{{{','.join(sorted(schema.properties))}}}"

    if schema.kind == SchemaType.ARRAY:
        if schema.items is not None:
            return f"array<{describe(schema.items)}>"
        return "array"

    text = schema.kind.value
    if schema.nullable:
        text += "?"
    if schema.format:
        text += f"({schema.format})"
    return text


def types_compatible(backend: TypeSchema, frontend: TypeSchema) -> bool:
    """Equal kinds are compatible; number and integer widen into each other."""
    if backend.kind == frontend.kind:
        return True
    return backend.kind in _NUMERIC and frontend.kind in _NUMERIC


def compare(
    backend: TypeSchema | None,
    frontend: TypeSchema | None,
    path: str = "",
) -> list[FieldMismatch]:
    """
    Structurally compare a backend schema against a frontend expectation.

    Args:
        backend: Schema the backend actually provides (truth)
        frontend: Schema the frontend expects
        path: Field path of this node; defaults to the root marker "$"

    Returns:
        Mismatches found at and below this node
    """
    path = path or ROOT_PATH

    if backend is None and frontend is None:
        return []

    if backend is None:
        return [FieldMismatch(
            field_path=path,
            mismatch_type=MismatchType.MISSING_IN_BACKEND,
            severity=MismatchSeverity.ERROR,
            description=f'Field "{path}" exists in frontend but not in backend',
            frontend_type=describe(frontend),
        )]

    if frontend is None:
        return [FieldMismatch(
            field_path=path,
            mismatch_type=MismatchType.MISSING_IN_FRONTEND,
            severity=MismatchSeverity.WARNING,
            description=f'Field "{path}" exists in backend but not used by frontend',
            backend_type=describe(backend),
        )]

    # "any" absorbs everything at this node
    if backend.kind == SchemaType.ANY or frontend.kind == SchemaType.ANY:
        return []

    if not types_compatible(backend, frontend):
        # An incompatible node invalidates everything below it
        return [FieldMismatch(
            field_path=path,
            mismatch_type=MismatchType.TYPE_MISMATCH,
            severity=MismatchSeverity.ERROR,
            description=(
                f'Type mismatch at "{path}": backend has {backend.kind.value}, '
                f"frontend expects {frontend.kind.value}"
            ),
            backend_type=backend.kind.value,
            frontend_type=frontend.kind.value,
        )]

    mismatches: list[FieldMismatch] = []

    if backend.nullable and not frontend.nullable:
        mismatches.append(FieldMismatch(
            field_path=path,
            mismatch_type=MismatchType.NULLABILITY_MISMATCH,
            severity=MismatchSeverity.WARNING,
            description=f'Nullability mismatch at "{path}": backend allows null, frontend doesn\'t handle it',
            backend_type=describe(backend),
            frontend_type=describe(frontend),
        ))

    if backend.kind == SchemaType.OBJECT:
        mismatches.extend(_compare_properties(backend, frontend, path))
    elif backend.kind == SchemaType.ARRAY:
        mismatches.extend(compare(backend.items, frontend.items, path + "[]"))

    return mismatches


def _compare_properties(backend: TypeSchema, frontend: TypeSchema, path: str) -> list[FieldMismatch]:
    mismatches: list[FieldMismatch] = []

    for name, backend_prop in backend.properties.items():
        prop_path = f"{path}.{name}"
        frontend_prop = frontend.properties.get(name)

        if frontend_prop is None:
            mismatches.append(FieldMismatch(
                field_path=prop_path,
                mismatch_type=MismatchType.MISSING_IN_FRONTEND,
                severity=MismatchSeverity.WARNING,
                description=f'Backend property "{prop_path}" is not used by frontend',
                backend_type=describe(backend_prop),
            ))
            continue

        mismatches.extend(compare(backend_prop, frontend_prop, prop_path))

        # Frontend tolerating absence is safe; only the reverse is flagged
        if not backend.is_required(name) and frontend.is_required(name):
            mismatches.append(FieldMismatch(
                field_path=prop_path,
                mismatch_type=MismatchType.OPTIONALITY_MISMATCH,
                severity=MismatchSeverity.WARNING,
                description=f'Optionality mismatch at "{prop_path}": optional in backend, required in frontend',
                backend_type=describe(backend_prop),
                frontend_type=describe(frontend_prop),
            ))

    for name, frontend_prop in frontend.properties.items():
        if name in backend.properties:
            continue
        prop_path = f"{path}.{name}"
        mismatches.append(FieldMismatch(
            field_path=prop_path,
            mismatch_type=MismatchType.MISSING_IN_BACKEND,
            severity=MismatchSeverity.ERROR,
            description=f"Frontend expects \"{prop_path}\" but backend doesn't provide it",
            frontend_type=describe(frontend_prop),
        ))

    return mismatches


# ---------------------------------------------------------------------------
# Type-name mappers used by extractors
# ---------------------------------------------------------------------------

_GO_INTEGERS = {
    "int", "int8", "int16", "int32", "int64",
    "uint", "uint8", "uint16", "uint32", "uint64",
}


def go_type_to_schema(go_type: str) -> TypeSchema:
    """
    Map a Go type expression to a schema.

    Examples:
        *string -> string?, []int64 -> array<integer>, time.Time -> string(date-time)
    """
    go_type = go_type.strip()
    nullable = go_type.startswith("*")
    go_type = go_type.lstrip("*")

    if go_type.startswith("[]"):
        return array_schema(go_type_to_schema(go_type[2:]), nullable=nullable)
    if go_type.startswith("map["):
        return object_schema(nullable=nullable)

    if go_type == "string":
        return primitive_schema(SchemaType.STRING, nullable)
    if go_type in _GO_INTEGERS:
        return primitive_schema(SchemaType.INTEGER, nullable)
    if go_type in ("float32", "float64"):
        return primitive_schema(SchemaType.NUMBER, nullable)
    if go_type == "bool":
        return primitive_schema(SchemaType.BOOLEAN, nullable)
    if go_type in ("interface{}", "any"):
        return primitive_schema(SchemaType.ANY, nullable)
    if go_type == "time.Time":
        return primitive_schema(SchemaType.STRING, nullable, format="date-time")
    if go_type == "uuid.UUID":
        return primitive_schema(SchemaType.STRING, nullable, format="uuid")

    # Named struct - not resolved across files
    return primitive_schema(SchemaType.UNKNOWN, nullable)


_TS_NULL_UNION = re.compile(r"\s*\|\s*(null|undefined)\b|\b(null|undefined)\s*\|\s*")


def ts_type_to_schema(ts_type: str) -> TypeSchema:
    """
    Map a TypeScript type expression to a schema.

    Examples:
        string | null -> string?, User[] -> array<unknown>, Date -> string(date-time)
    """
    ts_type = ts_type.strip()

    nullable = False
    stripped = _TS_NULL_UNION.sub("", ts_type).strip()
    if stripped and stripped != ts_type:
        nullable = True
        ts_type = stripped

    if ts_type.endswith("[]"):
        return array_schema(ts_type_to_schema(ts_type[:-2]), nullable=nullable)
    if ts_type.startswith("Array<") and ts_type.endswith(">"):
        return array_schema(ts_type_to_schema(ts_type[6:-1]), nullable=nullable)

    if ts_type == "string":
        return primitive_schema(SchemaType.STRING, nullable)
    if ts_type == "number":
        return primitive_schema(SchemaType.NUMBER, nullable)
    if ts_type == "boolean":
        return primitive_schema(SchemaType.BOOLEAN, nullable)
    if ts_type in ("null", "undefined"):
        return primitive_schema(SchemaType.NULL)
    if ts_type in ("any", "unknown"):
        return primitive_schema(SchemaType.ANY, nullable)
    if ts_type in ("object", "Object") or ts_type.startswith("Record<"):
        return object_schema(nullable=nullable)
    if ts_type == "Date":
        return primitive_schema(SchemaType.STRING, nullable, format="date-time")

    return primitive_schema(SchemaType.UNKNOWN, nullable)


_PY_OPTIONAL = re.compile(r"^(?:typing\.)?Optional\[(.+)\]$")
_PY_NONE_UNION = re.compile(r"\s*\|\s*None\b|\bNone\s*\|\s*")
_PY_LIST = re.compile(r"^(?:typing\.)?(?:list|List|Sequence|Iterable|tuple|Tuple|set|Set)\[(.+?)(?:,\s*\.\.\.)?\]$")
_PY_DICT = re.compile(r"^(?:typing\.)?(?:dict|Dict|Mapping)(\[.*\])?$")


def python_type_to_schema(py_type: str) -> TypeSchema:
    """
    Map a Python annotation string to a schema.

    Examples:
        Optional[int] -> integer?, list[str] -> array<string>, datetime -> string(date-time)
    """
    py_type = py_type.strip()

    nullable = False
    m = _PY_OPTIONAL.match(py_type)
    if m:
        nullable = True
        py_type = m.group(1).strip()
    else:
        stripped = _PY_NONE_UNION.sub("", py_type).strip()
        if stripped and stripped != py_type:
            nullable = True
            py_type = stripped

    m = _PY_LIST.match(py_type)
    if m:
        return array_schema(python_type_to_schema(m.group(1)), nullable=nullable)
    if py_type in ("list", "List", "tuple", "set"):
        return array_schema(primitive_schema(SchemaType.ANY), nullable=nullable)
    if _PY_DICT.match(py_type):
        return object_schema(nullable=nullable)

    if py_type == "str":
        return primitive_schema(SchemaType.STRING, nullable)
    if py_type == "int":
        return primitive_schema(SchemaType.INTEGER, nullable)
    if py_type in ("float", "Decimal", "decimal.Decimal"):
        return primitive_schema(SchemaType.NUMBER, nullable)
    if py_type == "bool":
        return primitive_schema(SchemaType.BOOLEAN, nullable)
    if py_type == "None":
        return primitive_schema(SchemaType.NULL)
    if py_type in ("Any", "typing.Any", "object"):
        return primitive_schema(SchemaType.ANY, nullable)
    if py_type in ("datetime", "datetime.datetime"):
        return primitive_schema(SchemaType.STRING, nullable, format="date-time")
    if py_type in ("date", "datetime.date"):
        return primitive_schema(SchemaType.STRING, nullable, format="date")
    if py_type in ("UUID", "uuid.UUID"):
        return primitive_schema(SchemaType.STRING, nullable, format="uuid")

    return primitive_schema(SchemaType.UNKNOWN, nullable)
