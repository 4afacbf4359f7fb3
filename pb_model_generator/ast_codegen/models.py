import ast
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from pb_model_generator.ast_codegen.base import (
    ImportCollector, ImportSpec, add_location, create_ann_assign, create_assign,
    create_attribute_call, create_boolean_constant, create_call, create_class_def,
    create_docstring, create_expression, create_function_def,
    create_keyword, create_list_of_strings, create_module, create_name,
    create_none_constant, create_return, create_string_constant,
)
from pb_model_generator.constants import GENERATED_MODULE_NAMES, ModelMembers, OutputFiles
from pb_model_generator.domain.enums import synthesize_enums
from pb_model_generator.domain.field_mapping import map_field_type, python_annotation
from pb_model_generator.domain.models import (
    CollectionSchema, EnumSpec, ExpandField, ExpandSpec, FieldSchema, SemanticType,
)
from pb_model_generator.domain.naming import module_name, to_member_name, type_name
from pb_model_generator.domain.relationships import ExpansionResolver
from pb_model_generator.exceptions import CodeGenerationError


logger = logging.getLogger(__name__)


GENERATED_NOTICE = "This file is auto-generated. Do not modify manually."

# Nullable members of these types accept PocketBase's empty string as None
BLANK_AS_NONE_TYPES = frozenset({SemanticType.DATETIME, SemanticType.ENUM, SemanticType.GEO_POINT})

# Typing names an annotation may use, imported only when referenced
TYPING_NAMES = ("Any", "Dict", "List", "Optional")


@dataclass(frozen=True)
class MemberSpec:
    """One annotated member of a generated model class."""

    identifier: str
    raw_name: str
    annotation: str
    nullable: bool
    semantic: Optional[SemanticType] = None

    @property
    def accepts_blank(self) -> bool:
        return self.nullable and self.semantic in BLANK_AS_NONE_TYPES


@dataclass(frozen=True)
class ModelClassSpec:
    """A generated pydantic model class."""

    name: str
    docstring: str
    members: Tuple[MemberSpec, ...]
    collection_id: Optional[str] = None
    collection_name: Optional[str] = None

    @property
    def has_collection_constants(self) -> bool:
        return self.collection_name is not None

    @property
    def blank_to_none_members(self) -> List[str]:
        return [member.identifier for member in self.members if member.accepts_blank]


@dataclass(frozen=True)
class ModelModule:
    """
    Structured fragments of one generated module, assembled once by
    :func:`render_model_module`.
    """

    module_name: str
    docstring: str
    imports: Tuple[ImportSpec, ...]
    enums: Tuple[EnumSpec, ...]
    data_class: ModelClassSpec
    expand: Optional[ExpandSpec] = None
    expand_class: Optional[ModelClassSpec] = None
    deferred_imports: Tuple[ImportSpec, ...] = ()

    @property
    def exports(self) -> List[str]:
        names = [enum_spec.name for enum_spec in self.enums]
        if self.expand_class:
            names.append(self.expand_class.name)
        names.append(self.data_class.name)
        return names

    @property
    def rebuilt_classes(self) -> List[str]:
        """Classes whose forward references are resolved again once the module is complete."""
        if self.expand_class is None:
            return []
        return [self.expand_class.name, self.data_class.name]


def build_member(schema_field: FieldSchema) -> MemberSpec:
    """Creates the member descriptor for a schema field."""
    mapped = map_field_type(schema_field)
    return MemberSpec(
        identifier=to_member_name(schema_field.name),
        raw_name=schema_field.name,
        annotation=python_annotation(mapped),
        nullable=mapped.nullable,
        semantic=mapped.semantic,
    )


def build_expand_member(expand_field: ExpandField) -> MemberSpec:
    """Creates the optional member for one expansion."""
    target = expand_field.target_type
    if not expand_field.is_single:
        target = f"List[{target}]"
    return MemberSpec(
        identifier=expand_field.identifier,
        raw_name=expand_field.raw_name,
        annotation=f"Optional[{target}]",
        nullable=True,
    )


def _check_unique(names: List[str], what: str, collection: CollectionSchema) -> None:
    seen = set()
    for name in names:
        if name in seen:
            raise CodeGenerationError(
                f"Two {what} of collection '{collection.name}' normalize to '{name}'",
                collection=collection.name,
            )
        seen.add(name)


def collect_imports(
    data_class: ModelClassSpec,
    enums: List[EnumSpec] = (),
    expand_class: Optional[ModelClassSpec] = None,
) -> List[ImportSpec]:
    """Work out the imports a module needs from the names its annotations use."""
    collector = ImportCollector()
    collector.add("__future__", "annotations")
    collector.add("pydantic", "BaseModel", "ConfigDict", "Field")
    # from_json / to_json signatures
    collector.add("typing", "Any", "Dict")

    classes = [data_class] + ([expand_class] if expand_class else [])
    members = [member for model_class in classes for member in model_class.members]

    if data_class.has_collection_constants:
        collector.add("typing", "ClassVar")
    if data_class.blank_to_none_members:
        collector.add("pydantic", "field_validator")
    if enums:
        collector.add("enum", "Enum")
    if expand_class:
        collector.add("typing", "Optional")

    for member in members:
        annotation_names = {
            node.id for node in ast.walk(ast.parse(member.annotation, mode="eval"))
            if isinstance(node, ast.Name)
        }
        for typing_name in TYPING_NAMES:
            if typing_name in annotation_names:
                collector.add("typing", typing_name)
        if "datetime" in annotation_names:
            collector.add("datetime", "datetime")
        if OutputFiles.GEO_POINT_TYPE in annotation_names and data_class.name != OutputFiles.GEO_POINT_TYPE:
            collector.add(OutputFiles.GEO_POINT_MODULE, OutputFiles.GEO_POINT_TYPE, level=1)

    return collector.specs()


def collect_deferred_imports(expand: Optional[ExpandSpec]) -> List[ImportSpec]:
    """
    Imports of other collections' data classes, placed after the class
    definitions so mutually expanding modules can import each other.
    """
    collector = ImportCollector()
    if expand:
        for expand_field in expand.fields:
            if not expand_field.is_self_reference:
                collector.add(expand_field.target_module, expand_field.target_type, level=1)
    return collector.specs()


def build_model_module(collection: CollectionSchema, resolver: Optional[ExpansionResolver] = None) -> ModelModule:
    """
    Assemble the structured fragments of one collection's module.

    Args:
        collection: Collection to generate
        resolver: Expansion resolver of the run; no Expand type without it

    Raises:
        DuplicateEnumVariantError: Two select values normalize to one variant
        CodeGenerationError: Two members or enums normalize to one identifier
    """
    logger.debug(f"Building model module for collection '{collection.name}'")

    enums = synthesize_enums(collection)
    _check_unique([enum_spec.name for enum_spec in enums], "select fields", collection)
    for enum_spec in enums:
        if enum_spec.name in GENERATED_MODULE_NAMES:
            raise CodeGenerationError(
                f"Enum name '{enum_spec.name}' of field '{enum_spec.field_name}' collides with a generated name",
                collection=collection.name,
            )

    members = [build_member(schema_field) for schema_field in collection.fields]

    expand = resolver.resolve(collection) if resolver else None
    expand_class = None
    if expand:
        expand_class = ModelClassSpec(
            name=expand.name,
            docstring=f"Related records embedded by the 'expand' query option of '{collection.name}'.",
            members=tuple(build_expand_member(expand_field) for expand_field in expand.fields),
        )
        members.append(MemberSpec(
            identifier=ModelMembers.EXPAND,
            raw_name=ModelMembers.EXPAND,
            annotation=f"Optional[{expand.name}]",
            nullable=True,
        ))

    _check_unique([member.identifier for member in members], "fields", collection)

    data_class = ModelClassSpec(
        name=type_name(collection.name, OutputFiles.DATA_TYPE_SUFFIX),
        docstring=f"Record of the '{collection.name}' collection.",
        members=tuple(members),
        collection_id=collection.id,
        collection_name=collection.name,
    )

    return ModelModule(
        module_name=module_name(collection.name),
        docstring=f"Models for the PocketBase '{collection.name}' collection.\n\n{GENERATED_NOTICE}\n",
        imports=tuple(collect_imports(data_class, enums, expand_class)),
        enums=tuple(enums),
        data_class=data_class,
        expand=expand,
        expand_class=expand_class,
        deferred_imports=tuple(collect_deferred_imports(expand)),
    )


def create_enum_class(enum_spec: EnumSpec) -> ast.ClassDef:
    """Creates a str-valued Enum class with a from_value lookup."""
    body: List[ast.stmt] = [
        create_docstring(f"Allowed values of the '{enum_spec.field_name}' select field.")
    ]
    for variant in enum_spec.variants:
        body.append(create_assign(variant.identifier, create_string_constant(variant.raw_value)))

    body.append(create_function_def(
        name=ModelMembers.FROM_VALUE,
        params=[("cls", None), ("value", "str")],
        body=[
            create_docstring("Look up a member by its raw value; raises ValueError when none matches."),
            create_return(create_call("cls", args=[create_name("value")])),
        ],
        returns=enum_spec.name,
        decorator_list=[create_name("classmethod")],
    ))
    return create_class_def(enum_spec.name, bases=["str", "Enum"], body=body)


def create_member(member: MemberSpec) -> ast.AnnAssign:
    """Creates 'name: Type = Field(...)' keeping the wire name as alias."""
    keywords = []
    if member.nullable:
        keywords.append(create_keyword("default", create_none_constant()))
    keywords.append(create_keyword("alias", create_string_constant(member.raw_name)))
    return create_ann_assign(member.identifier, member.annotation, create_call("Field", keywords=keywords))


def create_model_config() -> ast.Assign:
    """model_config allowing population by member name as well as by alias."""
    return create_assign(
        "model_config",
        create_call("ConfigDict", keywords=[
            create_keyword("populate_by_name", create_boolean_constant(True)),
            create_keyword("protected_namespaces", add_location(ast.Tuple(elts=[], ctx=ast.Load()))),
        ]),
    )


def create_blank_to_none_validator(member_names: List[str]) -> ast.FunctionDef:
    """Creates a before-validator mapping '' to None for the given members."""
    decorator = create_call(
        "field_validator",
        args=[create_string_constant(name) for name in member_names],
        keywords=[create_keyword("mode", create_string_constant("before"))],
    )
    is_blank = add_location(ast.Compare(
        left=create_name("value"),
        ops=[ast.Eq()],
        comparators=[create_string_constant("")],
    ))
    return create_function_def(
        name=ModelMembers.BLANK_VALIDATOR,
        params=[("cls", None), ("value", "Any")],
        body=[create_return(add_location(ast.IfExp(
            test=is_blank,
            body=create_none_constant(),
            orelse=create_name("value"),
        )))],
        returns="Any",
        decorator_list=[decorator, create_name("classmethod")],
    )


def create_from_json_method(class_name: str) -> ast.FunctionDef:
    return create_function_def(
        name=ModelMembers.FROM_JSON,
        params=[("cls", None), ("data", "Dict[str, Any]")],
        body=[
            create_docstring("Build an instance from a decoded PocketBase JSON object."),
            create_return(create_attribute_call("cls", "model_validate", args=[create_name("data")])),
        ],
        returns=class_name,
        decorator_list=[create_name("classmethod")],
    )


def create_to_json_method() -> ast.FunctionDef:
    return create_function_def(
        name=ModelMembers.TO_JSON,
        params=[("self", None)],
        body=[
            create_docstring("Serialize to a JSON-compatible dict keyed by PocketBase field names, omitting unset members."),
            create_return(create_attribute_call("self", "model_dump", keywords=[
                create_keyword("mode", create_string_constant("json")),
                create_keyword("by_alias", create_boolean_constant(True)),
                create_keyword("exclude_none", create_boolean_constant(True)),
            ])),
        ],
        returns="Dict[str, Any]",
    )


def create_model_class(spec: ModelClassSpec) -> ast.ClassDef:
    """Creates the AST node for a pydantic model class."""
    body: List[ast.stmt] = [create_docstring(spec.docstring), create_model_config()]

    if spec.has_collection_constants:
        body.append(create_ann_assign(
            ModelMembers.COLLECTION_ID, "ClassVar[str]", create_string_constant(spec.collection_id)
        ))
        body.append(create_ann_assign(
            ModelMembers.COLLECTION_NAME, "ClassVar[str]", create_string_constant(spec.collection_name)
        ))

    body.extend(create_member(member) for member in spec.members)

    blank_members = spec.blank_to_none_members
    if blank_members:
        body.append(create_blank_to_none_validator(blank_members))

    body.append(create_from_json_method(spec.name))
    body.append(create_to_json_method())
    return create_class_def(spec.name, bases=["BaseModel"], body=body)


def render_model_module(module: ModelModule) -> str:
    """
    Render structured module fragments into Python source.

    The output depends only on the fragments, so identical input always
    renders byte-identical text.
    """
    body: List[ast.stmt] = [create_docstring(module.docstring)]
    body.extend(spec.to_ast() for spec in module.imports)
    body.append(create_assign("__all__", create_list_of_strings(module.exports)))

    body.extend(create_enum_class(enum_spec) for enum_spec in module.enums)
    if module.expand_class:
        body.append(create_model_class(module.expand_class))
    body.append(create_model_class(module.data_class))

    body.extend(spec.to_ast() for spec in module.deferred_imports)
    for class_name in module.rebuilt_classes:
        body.append(create_expression(create_call(
            f"{class_name}.model_rebuild",
            keywords=[create_keyword("raise_errors", create_boolean_constant(False))],
        )))

    return ast.unparse(create_module(body)) + "\n"


def generate_model_code(collection: CollectionSchema, resolver: Optional[ExpansionResolver] = None) -> str:
    """Generate the complete module source for one collection."""
    module = build_model_module(collection, resolver)
    code = render_model_module(module)
    logger.debug(f"Generated {len(code.splitlines())} lines for {module.module_name}")
    return code
