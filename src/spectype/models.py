"""Canonical Pydantic models shared across all spectype modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into five groups:

**Configuration** -- :class:`GeneratorConfig`.

**Schema nodes** (input, produced by the document parser):
    :class:`ReferenceSchema`, :class:`CompositeSchema`, :class:`ArraySchema`,
    :class:`ObjectSchema`, :class:`PrimitiveSchema`, :class:`UntypedSchema`
    and :class:`PropertySchema`, united as :data:`SchemaNode`.

**Type nodes** (output of the type mapper):
    :class:`NamedType`, :class:`ArrayType`, :class:`ObjectType`,
    :class:`SumType`, :class:`ProductType`, :class:`LiteralSetType`,
    :class:`PrimitiveType` and :class:`NullableType`, united as
    :data:`TypeNode`.

**Document and analysis records** -- :class:`Document`,
:class:`OperationInfo`, :class:`AnalyzedOperation` and friends.

**Declarations** (what the synthesizer hands to the renderer) --
united as :data:`Declaration`, collected into :class:`GenerationResult`.

Both tree families are tagged unions discriminated on a ``kind`` literal.
Tree nodes are frozen: the mapper builds new nodes and never edits the
input graph.
"""

from __future__ import annotations

import enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


_NODE_CONFIG = ConfigDict(frozen=True, populate_by_name=True)


# --- Generator Config ---


class GeneratorConfig(BaseModel):
    """Options controlling a generation run.

    Resolved by :func:`~spectype.config.resolve_config` from CLI flags,
    environment variables and the project config file.

    Example::

        GeneratorConfig(remove_tag_from_operation_id=True, type_namespace="Types")
    """

    remove_tag_from_operation_id: bool = Field(
        default=False,
        description="Strip the tag text from the names exposed on tag accessors",
    )
    add_readonly_writeonly_modifiers: Optional[bool] = Field(
        default=None,
        description="Emit InputView/OutputView projections. None auto-detects "
        "readOnly/writeOnly usage in the document",
    )
    type_namespace: Optional[str] = Field(
        default=None,
        description="Import the type library as a namespace (e.g. 'Types')",
    )
    client_name: str = Field(default="ApiClient", description="Client class name")
    definitions_filename: str = "definitions.ts"
    api_filename: str = "api.ts"


# --- Enumerations ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised on OpenAPI path items, in analysis order."""

    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"
    HEAD = "head"
    OPTIONS = "options"
    TRACE = "trace"


class ParameterLocation(str, enum.Enum):
    """Locations where an API parameter can appear, per OpenAPI ``in`` field."""

    QUERY = "query"
    HEADER = "header"
    PATH = "path"
    COOKIE = "cookie"


class ViewFilter(str, enum.Enum):
    """Which side of the readOnly/writeOnly split a type is mapped for."""

    NONE = "none"
    INPUT = "input"
    OUTPUT = "output"


class ResponseKind(str, enum.Enum):
    """How the chosen success response is consumed by the client."""

    JSON = "json"
    TEXT = "text"
    OPAQUE = "opaque"
    VOID = "void"


class Severity(str, enum.Enum):
    WARNING = "warning"
    ERROR = "error"


class Diagnostic(BaseModel):
    """A located note produced while generating.

    ``code`` is a stable slug (``unsupported-schema-shape``,
    ``unresolved-reference``, ``circular-reference``, ``malformed-operation``,
    ``duplicate-method-name``, ``invalid-component``).
    """

    model_config = _NODE_CONFIG

    severity: Severity
    code: str
    message: str
    location: str = ""


# --- Schema Nodes ---


class ReferenceSchema(BaseModel):
    """A ``$ref`` to a named schema of the document's schema library."""

    model_config = _NODE_CONFIG

    kind: Literal["reference"] = "reference"
    target: str
    nullable: bool = False


class CompositeSchema(BaseModel):
    """``allOf`` (``all-of``) or ``oneOf``/``anyOf`` (``one-of``) composition."""

    model_config = _NODE_CONFIG

    kind: Literal["composite"] = "composite"
    mode: Literal["all-of", "one-of"]
    members: tuple[SchemaNode, ...] = ()
    nullable: bool = False


class ArraySchema(BaseModel):
    model_config = _NODE_CONFIG

    kind: Literal["array"] = "array"
    items: SchemaNode
    nullable: bool = False


class PropertySchema(BaseModel):
    """One declared property of an :class:`ObjectSchema`."""

    model_config = _NODE_CONFIG

    schema_: SchemaNode = Field(alias="schema")
    required: bool = False
    read_only: bool = False
    write_only: bool = False


class ObjectSchema(BaseModel):
    """An object schema.

    ``additional_properties`` is ``None`` when absent, a boolean when the
    document says ``true``/``false``, or a schema node.
    """

    model_config = _NODE_CONFIG

    kind: Literal["object"] = "object"
    properties: dict[str, PropertySchema] = Field(default_factory=dict)
    additional_properties: Union[SchemaNode, bool, None] = None
    nullable: bool = False


class PrimitiveSchema(BaseModel):
    model_config = _NODE_CONFIG

    kind: Literal["primitive"] = "primitive"
    type: Literal["string", "number", "integer", "boolean"]
    format: Optional[str] = None
    enum: Optional[tuple[Any, ...]] = None
    nullable: bool = False


class UntypedSchema(BaseModel):
    """A schema the grammar above cannot express (``{}``, ``not``, unknown type)."""

    model_config = _NODE_CONFIG

    kind: Literal["untyped"] = "untyped"
    reason: str = ""
    nullable: bool = False


SchemaNode = Annotated[
    Union[
        ReferenceSchema,
        CompositeSchema,
        ArraySchema,
        ObjectSchema,
        PrimitiveSchema,
        UntypedSchema,
    ],
    Field(discriminator="kind"),
]


# --- Type Nodes ---


class NamedType(BaseModel):
    """A reference to a named type.

    ``prefix`` qualifies the name, and its projection, with a namespace such
    as ``Types.``. ``view`` wraps the name in the ``InputView``/``OutputView``
    projection. ``builtin`` marks names provided by the target language
    (``DateTime``) rather than the generated type library.
    """

    model_config = _NODE_CONFIG

    kind: Literal["named"] = "named"
    name: str
    prefix: str = ""
    view: Optional[Literal["input", "output"]] = None
    builtin: bool = False


class ArrayType(BaseModel):
    model_config = _NODE_CONFIG

    kind: Literal["array"] = "array"
    items: TypeNode


class PropertyType(BaseModel):
    """A mapped object property.

    ``marked`` asks the renderer to tag the property so the projection
    utilities can strip it.
    """

    model_config = _NODE_CONFIG

    type: TypeNode
    optional: bool = False
    readonly: bool = False
    writeonly: bool = False
    marked: bool = False


class ObjectType(BaseModel):
    model_config = _NODE_CONFIG

    kind: Literal["object"] = "object"
    properties: dict[str, PropertyType] = Field(default_factory=dict)
    index_signature: Optional[TypeNode] = None


class SumType(BaseModel):
    """Alternatives (``A | B``)."""

    model_config = _NODE_CONFIG

    kind: Literal["sum"] = "sum"
    members: tuple[TypeNode, ...]


class ProductType(BaseModel):
    """Conjunction (``A & B``)."""

    model_config = _NODE_CONFIG

    kind: Literal["product"] = "product"
    members: tuple[TypeNode, ...]


class LiteralSetType(BaseModel):
    model_config = _NODE_CONFIG

    kind: Literal["literal-set"] = "literal-set"
    values: tuple[Any, ...]


class PrimitiveType(BaseModel):
    model_config = _NODE_CONFIG

    kind: Literal["primitive"] = "primitive"
    primitive: Literal[
        "string", "number", "integer", "boolean", "any", "unknown", "void"
    ]


class NullableType(BaseModel):
    model_config = _NODE_CONFIG

    kind: Literal["nullable"] = "nullable"
    inner: TypeNode


TypeNode = Annotated[
    Union[
        NamedType,
        ArrayType,
        ObjectType,
        SumType,
        ProductType,
        LiteralSetType,
        PrimitiveType,
        NullableType,
    ],
    Field(discriminator="kind"),
]


class MappingContext(BaseModel):
    """Parameters of one :func:`~spectype.generator.type_mapper.map_schema` call.

    ``prefix`` qualifies library names (``Types.``), ``view`` drops
    properties belonging only to the other side, ``wrap_views`` wraps
    references in the matching projection, and ``mark_modifiers`` tags
    readOnly/writeOnly properties for the projection utilities.
    """

    model_config = _NODE_CONFIG

    prefix: str = ""
    view: ViewFilter = ViewFilter.NONE
    wrap_views: bool = False
    mark_modifiers: bool = False


class MappedType(BaseModel):
    """Result of mapping one schema: the type plus what it touched."""

    model_config = _NODE_CONFIG

    type: TypeNode
    references: frozenset[str] = frozenset()
    notes: tuple[Diagnostic, ...] = ()


# --- Document ---


class APIParameter(BaseModel):
    """A single parameter of an operation, after path-level merging."""

    model_config = _NODE_CONFIG

    name: str
    location: ParameterLocation
    required: bool = False
    description: Optional[str] = None
    deprecated: bool = False
    schema_: Optional[SchemaNode] = Field(default=None, alias="schema")


class MediaContent(BaseModel):
    """One ``content`` entry: a media type and its optional schema."""

    model_config = _NODE_CONFIG

    media_type: str
    schema_: Optional[SchemaNode] = Field(default=None, alias="schema")


class RequestBodyInfo(BaseModel):
    model_config = _NODE_CONFIG

    required: bool = False
    description: Optional[str] = None
    content: tuple[MediaContent, ...] = ()


class ResponseInfo(BaseModel):
    """One entry of an operation's ``responses`` map, in declaration order."""

    model_config = _NODE_CONFIG

    status_code: str
    description: Optional[str] = None
    content: tuple[MediaContent, ...] = ()


class OperationInfo(BaseModel):
    """A single operation (one URL path + HTTP method pair) of the document."""

    model_config = _NODE_CONFIG

    path: str
    method: HTTPMethod
    operation_id: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    tags: tuple[str, ...] = ()
    parameters: tuple[APIParameter, ...] = ()
    request_body: Optional[RequestBodyInfo] = None
    responses: tuple[ResponseInfo, ...] = ()
    deprecated: bool = False

    @property
    def label(self) -> str:
        """``"GET /pets"`` style location used in diagnostics."""
        return f"{self.method.value.upper()} {self.path}"


class APIInfo(BaseModel):
    """API metadata extracted from the document's *Info Object*."""

    title: str = "Untitled API"
    version: str = "0.0.0"
    description: Optional[str] = None


class Document(BaseModel):
    """A parsed OpenAPI document, as supplied to the generation core.

    ``schemas`` and ``operations`` keep document declaration order, which the
    generated output follows. ``notes`` carries problems found while parsing
    (for example a parameter ``$ref`` that points nowhere).
    """

    openapi_version: str = "3.0.0"
    info: APIInfo = Field(default_factory=APIInfo)
    schemas: dict[str, SchemaNode] = Field(default_factory=dict)
    operations: list[OperationInfo] = Field(default_factory=list)
    notes: list[Diagnostic] = Field(default_factory=list)


# --- Analysis ---


class AnalyzedOperation(BaseModel):
    """Normalised facts about one (path, method, tag) triple.

    Produced by :func:`~spectype.generator.analyzer.analyze_operation` and
    consumed by the client synthesizer.
    """

    model_config = _NODE_CONFIG

    method: HTTPMethod
    path: str
    operation_id: str
    operation_id_synthesized: bool = False
    method_name: str
    tag: str
    raw_tag: str
    parameters: tuple[APIParameter, ...] = ()
    path_params: tuple[APIParameter, ...] = ()
    header_params: tuple[APIParameter, ...] = ()
    query_params: tuple[APIParameter, ...] = ()
    sends_data: bool = False
    request_body: Optional[SchemaNode] = None
    success_status: Optional[str] = None
    success_media_type: Optional[str] = None
    success_schema: Optional[SchemaNode] = None
    response_kind: ResponseKind = ResponseKind.VOID
    referenced_types: frozenset[str] = frozenset()
    summary: Optional[str] = None
    description: Optional[str] = None
    deprecated: bool = False

    @property
    def label(self) -> str:
        return f"{self.method.value.upper()} {self.path}"

    @property
    def has_params(self) -> bool:
        return bool(self.parameters)


class AnalysisResult(BaseModel):
    model_config = _NODE_CONFIG

    operations: tuple[AnalyzedOperation, ...] = ()
    diagnostics: tuple[Diagnostic, ...] = ()


# --- Declarations ---


class EnumMember(BaseModel):
    model_config = _NODE_CONFIG

    name: str
    value: Any


class ViewUtilitiesDeclaration(BaseModel):
    """The ``InputView<T>``/``OutputView<T>`` projection utilities."""

    model_config = _NODE_CONFIG

    kind: Literal["view-utilities"] = "view-utilities"


class EnumDeclaration(BaseModel):
    model_config = _NODE_CONFIG

    kind: Literal["enum"] = "enum"
    name: str
    members: tuple[EnumMember, ...]
    source: str = ""


class TypeAliasDeclaration(BaseModel):
    model_config = _NODE_CONFIG

    kind: Literal["alias"] = "alias"
    name: str
    type: TypeNode
    source: str = ""


class ImportDeclaration(BaseModel):
    """Type-only import of library names (or of the whole library as a namespace)."""

    model_config = _NODE_CONFIG

    kind: Literal["import"] = "import"
    module: str
    names: tuple[str, ...] = ()
    namespace: Optional[str] = None


class ExportDeclaration(BaseModel):
    model_config = _NODE_CONFIG

    kind: Literal["export"] = "export"
    names: tuple[str, ...]
    module: Optional[str] = None


class CallableDeclaration(BaseModel):
    """One client callable, bound to a single (path, method) operation."""

    model_config = _NODE_CONFIG

    kind: Literal["callable"] = "callable"
    name: str
    operation_id: str
    http_method: HTTPMethod
    path: str
    path_params: tuple[str, ...] = ()
    header_params: tuple[str, ...] = ()
    query_params: tuple[str, ...] = ()
    params_type: Optional[ObjectType] = None
    data_type: Optional[TypeNode] = None
    sends_data: bool = False
    return_type: TypeNode
    response_kind: ResponseKind = ResponseKind.VOID
    summary: Optional[str] = None
    deprecated: bool = False


class TagGroupDeclaration(BaseModel):
    """A read-only namespace accessor: exposed name -> callable name."""

    model_config = _NODE_CONFIG

    kind: Literal["tag-group"] = "tag-group"
    name: str
    members: dict[str, str] = Field(default_factory=dict)


class PickHelperDeclaration(BaseModel):
    """The shared helper projecting named fields out of ``params``."""

    model_config = _NODE_CONFIG

    kind: Literal["pick-helper"] = "pick-helper"


Declaration = Annotated[
    Union[
        ViewUtilitiesDeclaration,
        EnumDeclaration,
        TypeAliasDeclaration,
        ImportDeclaration,
        ExportDeclaration,
        CallableDeclaration,
        TagGroupDeclaration,
        PickHelperDeclaration,
    ],
    Field(discriminator="kind"),
]


class Artifact(BaseModel):
    """An ordered declaration list destined for one output file."""

    name: str
    filename: str
    declarations: list[Declaration] = Field(default_factory=list)


class ArtifactFailure(BaseModel):
    name: str
    message: str
    location: str = ""


class GenerationResult(BaseModel):
    """Everything one generation run produced.

    ``failures`` lists artifacts that could not be built at all; the CLI exits
    non-zero only when it is non-empty.
    """

    artifacts: list[Artifact] = Field(default_factory=list)
    diagnostics: list[Diagnostic] = Field(default_factory=list)
    failures: list[ArtifactFailure] = Field(default_factory=list)
    modifiers: bool = False

    @property
    def ok(self) -> bool:
        return not self.failures

    def artifact(self, name: str) -> Optional[Artifact]:
        for artifact in self.artifacts:
            if artifact.name == name:
                return artifact
        return None


for _model in (
    CompositeSchema,
    ArraySchema,
    PropertySchema,
    ObjectSchema,
    ArrayType,
    PropertyType,
    ObjectType,
    SumType,
    ProductType,
    NullableType,
    MappedType,
    APIParameter,
    MediaContent,
    RequestBodyInfo,
    ResponseInfo,
    OperationInfo,
    Document,
    AnalyzedOperation,
    AnalysisResult,
    TypeAliasDeclaration,
    CallableDeclaration,
    Artifact,
    GenerationResult,
):
    _model.model_rebuild()
del _model
