"""
Tests for resolving expansion mappings into Expand companion types.
"""

from unittest import TestCase

from pb_model_generator.domain.relationships import ExpansionResolver
from pb_model_generator.exceptions import RelationshipError, UnresolvedExpansionTargetError

from factories import blog_collections, blog_mappings, make_collection, make_field, mapping, relation_field


class TestExpansionResolver(TestCase):

    def setUp(self):
        self.collections = {c.name: c for c in blog_collections()}
        names = list(self.collections)
        self.resolver = ExpansionResolver(
            blog_mappings(),
            known_collections=names,
            emitted_collections=[name for name in names if not name.startswith("_")],
        )

    def test_no_mappings_yields_none(self):
        assert self.resolver.resolve(make_collection("notes", [make_field("id")])) is None

    def test_single_expansion(self):
        collection = make_collection("comments", [relation_field("author", max_select=1)])
        resolver = ExpansionResolver([mapping("comments", "author", "users")], known_collections=["comments", "users"])

        spec = resolver.resolve(collection)

        assert spec.name == "CommentDataExpand"
        assert spec.collection_name == "comments"
        assert len(spec.fields) == 1
        expand_field = spec.fields[0]
        assert expand_field.identifier == "author"
        assert expand_field.raw_name == "author"
        assert expand_field.target_type == "UserData"
        assert expand_field.target_module == "user_data"
        assert expand_field.is_single is True
        assert expand_field.is_self_reference is False
        assert resolver.warnings == []

    def test_fields_follow_mapping_order(self):
        spec = self.resolver.resolve(self.collections["posts"])
        assert [f.identifier for f in spec.fields] == ["author", "tags"]
        assert [f.is_single for f in spec.fields] == [True, False]
        assert spec.fields[1].target_type == "CategoryData"

    def test_identifier_is_normalized(self):
        spec = self.resolver.resolve(self.collections["users"])
        assert spec.fields[0].identifier == "favoritePosts"
        assert spec.fields[0].raw_name == "favorite_posts"

    def test_self_reference(self):
        spec = self.resolver.resolve(self.collections["categories"])
        assert spec.fields[0].target_type == "CategoryData"
        assert spec.fields[0].is_self_reference is True

    def test_internal_collection_can_be_a_source(self):
        spec = self.resolver.resolve(self.collections["_audit"])
        assert spec.name == "auditDataExpand"
        assert spec.fields[0].target_type == "UserData"

    def test_mappings_for(self):
        assert [m.source_field_name for m in self.resolver.mappings_for("posts")] == ["author", "tags"]
        assert self.resolver.mappings_for("nothing") == []


class TestExpansionPolicies(TestCase):

    def setUp(self):
        self.posts = make_collection("posts", [relation_field("author", max_select=1)])

    def test_unknown_target_warns_and_emits(self):
        resolver = ExpansionResolver([mapping("posts", "author", "people")], known_collections=["posts"])

        with self.assertLogs("pb_model_generator.domain.relationships", level="WARNING"):
            spec = resolver.resolve(self.posts)

        assert spec.fields[0].target_type == "PeopleData"
        assert len(resolver.warnings) == 1
        assert "'people'" in resolver.warnings[0]
        assert "is not a known collection" in resolver.warnings[0]

    def test_target_without_model_warns(self):
        resolver = ExpansionResolver(
            [mapping("posts", "author", "_superusers")],
            known_collections=["posts", "_superusers"],
            emitted_collections=["posts"],
        )
        with self.assertLogs("pb_model_generator.domain.relationships", level="WARNING"):
            resolver.resolve(self.posts)
        assert "has no generated model" in resolver.warnings[0]

    def test_strict_mode_raises(self):
        resolver = ExpansionResolver([mapping("posts", "author", "people")], known_collections=["posts"], strict=True)
        with self.assertRaises(UnresolvedExpansionTargetError) as ctx:
            resolver.resolve(self.posts)
        assert ctx.exception.context["target_collection"] == "people"
        assert isinstance(ctx.exception, RelationshipError)

    def test_missing_source_field_warns(self):
        resolver = ExpansionResolver([mapping("posts", "editor", "posts")], known_collections=["posts"])
        with self.assertLogs("pb_model_generator.domain.relationships", level="WARNING"):
            spec = resolver.resolve(self.posts)
        assert spec.fields[0].identifier == "editor"
        assert "does not exist" in resolver.warnings[0]

    def test_exact_duplicates_collapse(self):
        duplicate = mapping("posts", "author", "posts")
        resolver = ExpansionResolver([duplicate, duplicate], known_collections=["posts"])
        with self.assertLogs("pb_model_generator.domain.relationships", level="WARNING"):
            spec = resolver.resolve(self.posts)
        assert len(spec.fields) == 1
        assert "Duplicate expansion mapping" in resolver.warnings[0]

    def test_conflicting_identifiers_raise(self):
        resolver = ExpansionResolver(
            [mapping("posts", "author", "posts"), mapping("posts", "author", "posts", is_single=False)],
            known_collections=["posts"],
        )
        with self.assertRaises(RelationshipError):
            resolver.resolve(self.posts)

    def test_fields_normalizing_to_one_identifier_raise(self):
        resolver = ExpansionResolver(
            [mapping("posts", "main_author", "posts"), mapping("posts", "mainAuthor", "posts")],
            known_collections=["posts"],
        )
        with self.assertRaises(RelationshipError) as ctx:
            resolver.resolve(self.posts)
        assert "mainAuthor" in ctx.exception.message
