"""
Tests for the pydantic model code generator

This module tests the structured module fragments and their rendering.
"""

import ast
from unittest import TestCase

from pb_model_generator.ast_codegen.base import ImportCollector, ImportSpec, LOCAL_GROUP, STDLIB_GROUP
from pb_model_generator.ast_codegen.geo_point import build_geo_point_module, generate_geo_point_code
from pb_model_generator.ast_codegen.models import (
    build_expand_member,
    build_member,
    build_model_module,
    collect_imports,
    create_enum_class,
    generate_model_code,
    render_model_module,
)
from pb_model_generator.domain.enums import synthesize_enum
from pb_model_generator.domain.models import ExpandField, FieldKind
from pb_model_generator.domain.relationships import ExpansionResolver
from pb_model_generator.exceptions import CodeGenerationError, DuplicateEnumVariantError

from factories import blog_collections, blog_mappings, make_collection, make_field, mapping, select_field


def blog_resolver():
    names = [c.name for c in blog_collections()]
    return ExpansionResolver(
        blog_mappings(),
        known_collections=names,
        emitted_collections=[name for name in names if not name.startswith("_")],
    )


def get_collection(name):
    return next(c for c in blog_collections() if c.name == name)


def class_names(code):
    return [node.name for node in ast.parse(code).body if isinstance(node, ast.ClassDef)]


class TestBuildMember(TestCase):

    def test_required_member(self):
        member = build_member(make_field("title", required=True))
        assert member.identifier == "title"
        assert member.raw_name == "title"
        assert member.annotation == "str"
        assert member.nullable is False
        assert member.accepts_blank is False

    def test_nullable_member_keeps_raw_name(self):
        member = build_member(make_field("view_count", FieldKind.NUMBER))
        assert member.identifier == "viewCount"
        assert member.raw_name == "view_count"
        assert member.annotation == "Optional[int]"

    def test_blank_accepted_for_nullable_dates(self):
        assert build_member(make_field("published_at", FieldKind.DATE)).accepts_blank is True
        assert build_member(make_field("published_at", FieldKind.DATE, required=True)).accepts_blank is False
        assert build_member(make_field("name")).accepts_blank is False

    def test_expand_members(self):
        single = ExpandField("author", "author", "UserData", "user_data", is_single=True)
        multi = ExpandField("tags", "tags", "CategoryData", "category_data", is_single=False)
        assert build_expand_member(single).annotation == "Optional[UserData]"
        assert build_expand_member(multi).annotation == "Optional[List[CategoryData]]"
        assert build_expand_member(multi).nullable is True


class TestBuildModelModule(TestCase):

    def test_posts_fragments(self):
        module = build_model_module(get_collection("posts"), blog_resolver())

        assert module.module_name == "post_data"
        assert module.data_class.name == "PostData"
        assert module.data_class.collection_id == "pbc_posts"
        assert module.data_class.collection_name == "posts"
        assert [e.name for e in module.enums] == ["StatusEnum"]
        assert module.expand_class.name == "PostDataExpand"
        assert module.exports == ["StatusEnum", "PostDataExpand", "PostData"]
        assert module.rebuilt_classes == ["PostDataExpand", "PostData"]

        identifiers = [m.identifier for m in module.data_class.members]
        assert identifiers == [
            "id", "title", "status", "author", "tags", "metadata", "location",
            "viewCount", "rating", "publishedAt", "created", "expand",
        ]
        assert module.data_class.blank_to_none_members == ["status", "location", "publishedAt", "created"]

    def test_member_annotations(self):
        module = build_model_module(get_collection("posts"), blog_resolver())
        annotations = {m.identifier: m.annotation for m in module.data_class.members}

        assert annotations["title"] == "str"
        assert annotations["status"] == "Optional[StatusEnum]"
        assert annotations["author"] == "Optional[str]"
        assert annotations["tags"] == "Optional[List[str]]"
        assert annotations["metadata"] == "Optional[Dict[str, Any]]"
        assert annotations["location"] == "Optional[GeoPointData]"
        assert annotations["viewCount"] == "Optional[int]"
        assert annotations["rating"] == "Optional[float]"
        assert annotations["publishedAt"] == "Optional[datetime]"
        assert annotations["expand"] == "Optional[PostDataExpand]"

    def test_imports_are_grouped_and_sorted(self):
        module = build_model_module(get_collection("posts"), blog_resolver())
        rendered = [(spec.module, spec.names, spec.level) for spec in module.imports]

        assert rendered == [
            ("__future__", ("annotations",), 0),
            ("datetime", ("datetime",), 0),
            ("enum", ("Enum",), 0),
            ("typing", ("Any", "ClassVar", "Dict", "List", "Optional"), 0),
            ("pydantic", ("BaseModel", "ConfigDict", "Field", "field_validator"), 0),
            ("geo_point_data", ("GeoPointData",), 1),
        ]

    def test_deferred_imports_skip_self_reference(self):
        posts = build_model_module(get_collection("posts"), blog_resolver())
        categories = build_model_module(get_collection("categories"), blog_resolver())

        assert [(s.module, s.names) for s in posts.deferred_imports] == [
            ("category_data", ("CategoryData",)),
            ("user_data", ("UserData",)),
        ]
        assert categories.deferred_imports == ()

    def test_without_resolver_there_is_no_expand(self):
        module = build_model_module(get_collection("posts"))
        assert module.expand is None
        assert module.expand_class is None
        assert module.deferred_imports == ()
        assert module.rebuilt_classes == []
        assert "expand" not in [m.identifier for m in module.data_class.members]

    def test_minimal_imports(self):
        module = build_model_module(make_collection("notes", [make_field("body", required=True)]))
        assert [(s.module, s.names) for s in module.imports] == [
            ("__future__", ("annotations",)),
            ("typing", ("Any", "ClassVar", "Dict")),
            ("pydantic", ("BaseModel", "ConfigDict", "Field")),
        ]

    def test_duplicate_member_identifiers_raise(self):
        collection = make_collection("notes", [make_field("first_name"), make_field("firstName")])
        with self.assertRaises(CodeGenerationError) as ctx:
            build_model_module(collection)
        assert ctx.exception.context == {"collection": "notes"}

    def test_field_named_expand_collides_with_expansion(self):
        collection = make_collection("notes", [make_field("expand"), make_field("owner")])
        resolver = ExpansionResolver([mapping("notes", "owner", "notes")], known_collections=["notes"])
        with self.assertRaises(CodeGenerationError):
            build_model_module(collection, resolver)

    def test_duplicate_enum_names_raise(self):
        collection = make_collection("tasks", [select_field("task_state", ["a"]), select_field("taskState", ["b"])])
        with self.assertRaises(CodeGenerationError):
            build_model_module(collection)

    def test_duplicate_enum_variant_propagates(self):
        collection = make_collection("tasks", [select_field("state", ["in progress", "in_progress"])])
        with self.assertRaises(DuplicateEnumVariantError):
            build_model_module(collection)


class TestRenderModelModule(TestCase):

    def setUp(self):
        self.code = generate_model_code(get_collection("posts"), blog_resolver())

    def test_output_is_valid_python(self):
        compile(self.code, "post_data.py", "exec")

    def test_layout_order(self):
        tree = ast.parse(self.code)
        assert ast.get_docstring(tree).startswith("Models for the PocketBase 'posts' collection.")
        assert "auto-generated" in ast.get_docstring(tree)

        first_import = tree.body[1]
        assert isinstance(first_import, ast.ImportFrom)
        assert first_import.module == "__future__"

        assert class_names(self.code) == ["StatusEnum", "PostDataExpand", "PostData"]

        tail = [ast.unparse(node) for node in tree.body[-4:]]
        assert tail == [
            "from .category_data import CategoryData",
            "from .user_data import UserData",
            "PostDataExpand.model_rebuild(raise_errors=False)",
            "PostData.model_rebuild(raise_errors=False)",
        ]

    def test_all_lists_classes(self):
        assert "__all__ = ['StatusEnum', 'PostDataExpand', 'PostData']" in self.code

    def test_enum_class(self):
        assert "class StatusEnum(str, Enum):" in self.code
        assert "draft = 'draft'" in self.code
        assert "def from_value(cls, value: str) -> StatusEnum:" in self.code

    def test_data_class_members(self):
        assert "class PostData(BaseModel):" in self.code
        assert "model_config = ConfigDict(populate_by_name=True, protected_namespaces=())" in self.code
        assert "COLLECTION_ID: ClassVar[str] = 'pbc_posts'" in self.code
        assert "COLLECTION_NAME: ClassVar[str] = 'posts'" in self.code
        assert "title: str = Field(alias='title')" in self.code
        assert "viewCount: Optional[int] = Field(default=None, alias='view_count')" in self.code
        assert "expand: Optional[PostDataExpand] = Field(default=None, alias='expand')" in self.code

    def test_expand_class_members(self):
        assert "author: Optional[UserData] = Field(default=None, alias='author')" in self.code
        assert "tags: Optional[List[CategoryData]] = Field(default=None, alias='tags')" in self.code

    def test_blank_validator(self):
        assert "@field_validator('status', 'location', 'publishedAt', 'created', mode='before')" in self.code
        assert "return None if value == '' else value" in self.code

    def test_json_helpers(self):
        assert "def from_json(cls, data: Dict[str, Any]) -> PostData:" in self.code
        assert "return cls.model_validate(data)" in self.code
        assert "return self.model_dump(mode='json', by_alias=True, exclude_none=True)" in self.code

    def test_relations_stay_raw_strings(self):
        assert "author: Optional[str] = Field(default=None, alias='author')" in self.code

    def test_self_referencing_module_has_no_self_import(self):
        code = generate_model_code(get_collection("categories"), blog_resolver())
        compile(code, "category_data.py", "exec")
        assert "import CategoryData" not in code
        assert "parent: Optional[CategoryData] = Field(default=None, alias='parent')" in code
        assert "CategoryDataExpand.model_rebuild(raise_errors=False)" in code

    def test_rendering_is_deterministic(self):
        again = generate_model_code(get_collection("posts"), blog_resolver())
        assert again == self.code

    def test_enum_class_node(self):
        node = create_enum_class(synthesize_enum(select_field("status", ["1st", "In Progress"])))
        code = ast.unparse(node)
        assert "v1st = '1st'" in code
        assert "InProgress = 'In Progress'" in code


class TestGeoPointModule(TestCase):

    def test_members(self):
        module = build_geo_point_module()
        assert module.module_name == "geo_point_data"
        assert module.exports == ["GeoPointData"]
        assert [(m.identifier, m.raw_name, m.annotation) for m in module.data_class.members] == [
            ("longitude", "lon", "float"),
            ("latitude", "lat", "float"),
        ]

    def test_code(self):
        code = generate_geo_point_code()
        compile(code, "geo_point_data.py", "exec")
        assert "longitude: float = Field(alias='lon')" in code
        assert "latitude: float = Field(alias='lat')" in code
        # No collection constants and no import of itself
        assert "COLLECTION_ID" not in code
        assert "from .geo_point_data" not in code


class TestImportCollector(TestCase):

    def test_names_are_merged_and_sorted(self):
        specs = ImportCollector().add("typing", "Optional").add("typing", "Any", "Optional").specs()
        assert specs == [ImportSpec("typing", ("Any", "Optional"))]

    def test_groups(self):
        assert ImportSpec("typing", ("Any",)).group == STDLIB_GROUP
        assert ImportSpec("user_data", ("UserData",), level=1).group == LOCAL_GROUP

    def test_relative_import_rendering(self):
        node = ImportSpec("geo_point_data", ("GeoPointData",), level=1).to_ast()
        assert ast.unparse(node) == "from .geo_point_data import GeoPointData"

    def test_collect_imports_for_geo_class_skips_itself(self):
        specs = collect_imports(build_geo_point_module().data_class)
        assert all(spec.level == 0 for spec in specs)
