"""
Schema node model.

Schema documents are plain JSON (nested dicts and lists). They are validated
once, when the resolver loads them, into a closed set of immutable pydantic
models: StringSchema, ObjectSchema, ArraySchema, RefSchema and
UnsupportedSchema. The variant is picked from ``type``; a node without a
``type`` must carry a ``$ref``. A RefSchema only survives resolution when its
reference is cyclic. Nodes with a type this extractor does not know
(``number``, ``boolean``, ...) load as UnsupportedSchema and extract to None.
"""

from typing import Annotated, Any, ClassVar, Dict, List, Optional, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    TypeAdapter,
    ValidationError,
    field_validator,
)

from .exceptions import SchemaFormatError

# Keys used in schema documents
SELECTOR = 'x-aem-selector'
ATTRIBUTE = 'x-aem-attribute'
BASE_REF = 'x-aem-base-ref'
REF = '$ref'

# Attribute sentinel: use the element's text content
TEXT = 'text'

STRING = 'string'
OBJECT = 'object'
ARRAY = 'array'

# discriminator tags for nodes without a known type
REF_KIND = 'ref'
UNSUPPORTED_KIND = 'unsupported'


class SchemaNode(BaseModel):
    """Fields shared by every schema node."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: ClassVar[str] = ''

    selector: Optional[str] = Field(None, alias=SELECTOR)
    attribute: Optional[str] = Field(None, alias=ATTRIBUTE)
    description: Optional[str] = None
    title: Optional[str] = None
    # set when the node was produced by resolving a $ref
    from_ref: bool = Field(False, alias=BASE_REF)


class StringSchema(SchemaNode):
    kind: ClassVar[str] = STRING

    format: Optional[str] = None


class ObjectSchema(SchemaNode):
    kind: ClassVar[str] = OBJECT

    properties: Dict[str, 'Schema'] = Field(default_factory=dict)
    required: Tuple[str, ...] = ()

    @field_validator('required')
    @classmethod
    def _dedupe_required(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        # keep order
        return tuple(dict.fromkeys(value))


class ArraySchema(SchemaNode):
    kind: ClassVar[str] = ARRAY

    items: Optional['Schema'] = None


class RefSchema(SchemaNode):
    kind: ClassVar[str] = REF_KIND

    ref: str = Field(alias=REF, min_length=1)


class UnsupportedSchema(SchemaNode):
    kind: ClassVar[str] = UNSUPPORTED_KIND

    type: str


def _schema_kind(value: Any) -> Optional[str]:
    if isinstance(value, SchemaNode):
        return value.kind
    if not isinstance(value, dict):
        return None

    schema_type = value.get('type')
    if schema_type is None:
        return REF_KIND
    if schema_type in (STRING, OBJECT, ARRAY):
        return schema_type
    return UNSUPPORTED_KIND


Schema = Annotated[
    Union[
        Annotated[StringSchema, Tag(STRING)],
        Annotated[ObjectSchema, Tag(OBJECT)],
        Annotated[ArraySchema, Tag(ARRAY)],
        Annotated[RefSchema, Tag(REF_KIND)],
        Annotated[UnsupportedSchema, Tag(UNSUPPORTED_KIND)],
    ],
    Discriminator(_schema_kind),
]

ObjectSchema.model_rebuild()
ArraySchema.model_rebuild()

_schema_adapter = TypeAdapter(Schema)


def parse_schema(document: Any, path: str = '#') -> Schema:
    """Validate a (resolved) schema document and build its node tree.

    Raises SchemaFormatError on anything outside the supported shape.
    """
    try:
        return _schema_adapter.validate_python(document)
    except ValidationError as e:
        raise SchemaFormatError(f'{path}: invalid schema: {e}') from e


def unresolved_refs(schema: SchemaNode) -> List[str]:
    """Reference targets left unresolved anywhere in a schema tree."""
    names: List[str] = []
    if isinstance(schema, RefSchema):
        names.append(schema.ref)
    elif isinstance(schema, ObjectSchema):
        for prop in schema.properties.values():
            names.extend(unresolved_refs(prop))
    elif isinstance(schema, ArraySchema) and schema.items is not None:
        names.extend(unresolved_refs(schema.items))
    return names
