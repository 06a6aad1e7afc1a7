"""Introspection queries and decoding of their responses.

The crawler issues one fixed schema-level query to find the root types and
one per-type ``__type`` query for everything else. Type references are
unwrapped through up to four levels of ``ofType`` so NON_NULL/LIST wrapping
resolves down to a named type.
"""

import json
import logging
from typing import Any, Callable

from .ir import EnumValue, FieldInfo, FieldType, TypeKind

logger = logging.getLogger(__name__)

SCHEMA_QUERY = "{__schema {queryType {name} mutationType {name} }}"

TYPE_QUERY_TEMPLATE = """\
{
  __type(name: %s) {
    name
    kind
    description
    interfaces {
      name
    }
    inputFields {
      name
      description
      defaultValue
      type {
        ...typeInfo
      }
    }
    fields {
      name
      description
      args {
        name
        description
        defaultValue
        type {
          ...typeInfo
        }
      }
      type {
        ...typeInfo
      }
    }
    possibleTypes {
      name
    }
    enumValues {
      name
      description
    }
  }
}
fragment typeInfo on __Type {
  name
  kind
  ofType {
    name
    kind
    ofType {
      name
      kind
      ofType {
        name
        kind
        ofType {
          name
          kind
        }
      }
    }
  }
}
"""

# Kinds that name another type in the schema and must be crawled
NAMED_KINDS = {
    "OBJECT": TypeKind.OBJECT,
    "INTERFACE": TypeKind.INTERFACE,
    "UNION": TypeKind.UNION,
    "ENUM": TypeKind.ENUM,
    "INPUT_OBJECT": TypeKind.INPUT_OBJECT,
}

BUILTIN_SCALARS = {
    "Int": TypeKind.INT,
    "Float": TypeKind.FLOAT,
    "String": TypeKind.STRING,
    "Boolean": TypeKind.BOOLEAN,
    "ID": TypeKind.ID,
}

UNKNOWN_TYPE_NAME = "Unknown"

OnReference = Callable[[str], None]


def type_query(type_name: str) -> str:
    """Return the per-type introspection query for ``type_name``."""
    return TYPE_QUERY_TEMPLATE % json.dumps(type_name)


def request_body(query: str) -> str:
    """Wrap a query in the ``{"query": ...}`` request body."""
    return json.dumps({"query": query})


def parse_response(body: str) -> dict[str, Any]:
    """Parse a response body into a JSON object.

    Raises:
        ValueError: If the body is not a JSON object
    """
    result = json.loads(body)
    if not isinstance(result, dict):
        raise ValueError(f"Expected a JSON object, got {type(result).__name__}")
    return result


def error_messages(response: dict[str, Any]) -> list[str]:
    """Collect the non-null ``message`` of every entry in ``errors``."""
    errors = response.get("errors") or []
    messages = []
    for error in errors:
        if isinstance(error, dict) and error.get("message") is not None:
            messages.append(str(error["message"]))
    return messages


def decode_class_kind(kind: str | None) -> TypeKind:
    """Map the ``kind`` of a ``__type`` to the kind of its ClassInfo."""
    if kind in NAMED_KINDS:
        return NAMED_KINDS[kind]
    logger.warning("Unexpected kind %r for a class type, treating it as OBJECT", kind)
    return TypeKind.OBJECT


def decode_field_type(
    type_json: dict[str, Any] | None,
    on_reference: OnReference,
    nullable: bool = True,
) -> FieldType:
    """Decode a (possibly wrapped) type reference.

    NON_NULL unwraps to its inner type with ``nullable=False``; LIST becomes a
    LIST FieldType around the decoded inner type; named compound kinds are
    reported to ``on_reference`` so the crawler can enqueue them.
    """
    if not type_json:
        logger.warning("Type reference nested deeper than the introspection query unwraps")
        return FieldType(UNKNOWN_TYPE_NAME, TypeKind.STRING, nullable)

    kind = type_json.get("kind")
    if kind == "NON_NULL":
        return decode_field_type(type_json.get("ofType"), on_reference, nullable=False)
    if kind == "LIST":
        return FieldType(
            "",
            TypeKind.LIST,
            nullable,
            sub_type=decode_field_type(type_json.get("ofType"), on_reference),
        )

    name = type_json.get("name") or UNKNOWN_TYPE_NAME
    if kind in NAMED_KINDS:
        on_reference(name)
        return FieldType(name, NAMED_KINDS[kind], nullable)
    # Custom scalars travel as strings
    return FieldType(name, BUILTIN_SCALARS.get(name, TypeKind.STRING), nullable)


def decode_fields(
    type_json: dict[str, Any],
    key: str,
    on_reference: OnReference,
) -> list[FieldInfo]:
    """Decode ``fields``, ``inputFields`` or ``args`` of a type or field."""
    fields = []
    for field_json in type_json.get(key) or []:
        info = FieldInfo(
            name=field_json["name"],
            field_type=decode_field_type(field_json.get("type"), on_reference),
            description=field_json.get("description"),
            default_value=field_json.get("defaultValue"),
        )
        if "args" in field_json:
            info.field_args = decode_fields(field_json, "args", on_reference)
        fields.append(info)
    return fields


def decode_enum_values(type_json: dict[str, Any]) -> list[EnumValue]:
    return [
        EnumValue(name=value["name"], description=value.get("description"))
        for value in type_json.get("enumValues") or []
    ]


def connection_names(type_json: dict[str, Any], key: str) -> list[str]:
    """Names listed under ``interfaces`` or ``possibleTypes``."""
    return [
        entry["name"]
        for entry in type_json.get(key) or []
        if isinstance(entry, dict) and entry.get("name")
    ]
