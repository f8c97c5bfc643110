"""
Тесты разрешения типов и генерации types.ts
"""

import pytest

from sdk_ts_gen.exceptions import UnresolvedReferenceError
from sdk_ts_gen.internal.generator.type_generator import TypeGenerator
from sdk_ts_gen.internal.parser import load_document
from sdk_ts_gen.internal.types.schema_resolver import TypeResolver


def make_graph(schemas=None, paths=None):
    return load_document(
        {
            "openapi": "3.0.0",
            "info": {"title": "Test API", "version": "1.0.0"},
            "paths": paths or {},
            "components": {"schemas": schemas or {}},
        }
    )


def ref(name):
    return {"$ref": f"#/components/schemas/{name}"}


class TestTypeResolver:
    """Тесты правил разрешения типов"""

    @pytest.fixture
    def resolver(self):
        return TypeResolver(make_graph({"Item": {"type": "object"}}))

    def test_named_reference_not_inlined(self, resolver):
        """Тест именованной ссылки"""
        assert resolver.type_of(ref("Item")) == "Item"
        assert resolver.type_of(ref("item_list")) == "ItemList"

    def test_resolve_returns_name_and_side_types(self, resolver):
        """Тест контракта resolve"""
        resolved = resolver.resolve(ref("Item"))
        assert resolved.name == "Item"
        assert resolved.side_types == ()

        plain = resolver.resolve({"type": "string", "enum": ["a"]})
        assert (plain.name, plain.side_types) == ("'a'", ())

    def test_resolve_enum_alias(self, resolver):
        """Тест именованного алиаса для inline enum"""
        resolved = resolver.resolve(
            {"type": "array", "items": {"type": "string", "enum": ["name", "-created_at"]}},
            alias="ListSortOption",
        )
        assert resolved.name == "ListSortOption[]"
        assert [str(t) for t in resolved.side_types] == [
            "export type ListSortOption = 'name' | '-createdAt';"
        ]

        scalar = resolver.resolve({"enum": ["on", "off"]}, alias="Mode")
        assert scalar.name == "Mode"
        assert len(scalar.side_types) == 1

        # Ссылка не заменяется алиасом
        assert resolver.resolve(ref("Item"), alias="Other") == ("Item", ())

    def test_side_types_not_shared(self, resolver):
        """Тест: результаты resolve не делят изменяемое состояние"""
        first = resolver.resolve(ref("Item"))
        second = resolver.resolve({"type": "integer"})

        assert first.side_types == second.side_types == ()
        assert isinstance(first.side_types, tuple)

    def test_yaml_date_enum(self):
        """Тест enum и const из дат YAML без кавычек"""
        graph = load_document(
            b"openapi: 3.0.0\n"
            b"paths: {}\n"
            b"components:\n"
            b"  schemas:\n"
            b"    ReleaseDate:\n"
            b"      type: string\n"
            b"      enum: [2024-01-01, 2024-06-01]\n"
            b"    Release:\n"
            b"      type: object\n"
            b"      properties:\n"
            b"        cutoff: {type: string, enum: [2024-01-01]}\n"
            b"        launch: {const: 2024-06-01}\n"
        )
        generator = TypeGenerator(graph)
        types_ts = str(generator.generate(generator.get_type_definitions()))

        assert 'export type ReleaseDate = "2024-01-01" | "2024-06-01";' in types_ts
        assert "  cutoff?: '2024-01-01';" in types_ts
        assert "  launch?: '2024-06-01';" in types_ts

    @pytest.mark.parametrize(
        "schema, expected",
        [
            ({"type": "string", "enum": ["active", "in_review"]}, "'active' | 'inReview'"),
            ({"type": "integer", "enum": [1, 2, 2]}, "1 | 2"),
            ({"type": "boolean", "enum": [True, False]}, "true | false"),
            ({"enum": ["a", None]}, "'a' | null"),
        ],
    )
    def test_inline_enum(self, resolver, schema, expected):
        """Тест inline enum"""
        assert resolver.type_of(schema) == expected

    @pytest.mark.parametrize(
        "schema, expected",
        [
            ({"type": ["string", "null"]}, "string | null"),
            ({"type": ["integer", "number"]}, "number"),
            ({"type": ["array", "null"], "items": ref("Item")}, "Item[] | null"),
        ],
    )
    def test_type_list(self, resolver, schema, expected):
        """Тест списка типов OpenAPI 3.1"""
        assert resolver.type_of(schema) == expected

    @pytest.mark.parametrize(
        "schema, expected",
        [
            ({"type": "integer"}, "number"),
            ({"type": "number", "format": "double"}, "number"),
            ({"type": "boolean"}, "boolean"),
            ({"type": "string"}, "string"),
            ({"type": "string", "format": "uuid"}, "string"),
            ({"type": "string", "format": "date"}, "string"),
            ({"type": "string", "format": "date-time"}, "string"),
            ({"type": "string", "format": "binary"}, "Blob"),
            ({"type": "object"}, "any"),
            ({"type": "array", "items": ref("Item")}, "Item[]"),
            ({"type": "array", "items": {"type": ["string", "null"]}}, "(string | null)[]"),
            ({"type": "array"}, "any[]"),
            ({"type": "file"}, "any"),
            ({}, "any"),
            (None, "any"),
        ],
    )
    def test_scalar_mapping(self, resolver, schema, expected):
        """Тест базовых типов и фолбэка any"""
        assert resolver.type_of(schema) == expected

    def test_date_time_in_response_context(self, resolver):
        """Тест date-time -> Date для типов ответа"""
        schema = {"type": "string", "format": "date-time"}
        assert resolver.type_of(schema, dates_as_date=True) == "Date"
        assert resolver.type_of({"type": "array", "items": schema}, dates_as_date=True) == "Date[]"

    def test_additional_properties(self, resolver):
        """Тест словаря со значениями заданного типа"""
        schema = {"type": "object", "additionalProperties": {"type": "integer"}}
        assert resolver.type_of(schema) == "Record<string, number>"

    def test_inline_object(self, resolver):
        """Тест inline объекта со свойствами"""
        schema = {
            "type": "object",
            "required": ["b"],
            "properties": {"b": {"type": "string"}, "a_b": {"type": "integer"}},
        }
        assert resolver.type_of(schema) == "{ aB?: number; b: string }"

    def test_inline_object_embedded_promotion(self, resolver):
        """Тест подъема _embedded в inline объекте"""
        schema = {
            "type": "object",
            "properties": {
                "total": {"type": "integer"},
                "_embedded": {
                    "type": "object",
                    "required": ["items"],
                    "properties": {"items": {"type": "array", "items": ref("Item")}},
                },
            },
        }
        assert resolver.type_of(schema) == "{ total?: number; items: Item[] }"

        only_embedded = {
            "type": "object",
            "properties": {
                "_embedded": {
                    "type": "object",
                    "properties": {"items": {"type": "array", "items": ref("Item")}},
                }
            },
        }
        assert resolver.type_of(only_embedded) == "{ items?: Item[] }"

    def test_compositions(self, resolver):
        """Тест oneOf, anyOf, allOf и const"""
        assert resolver.type_of({"oneOf": [ref("A"), ref("B")]}) == "A | B"
        assert resolver.type_of({"anyOf": [ref("A"), ref("A")]}) == "A"
        assert (
            resolver.type_of(
                {"allOf": [ref("A"), {"type": "object", "properties": {"x": {"type": "string"}}}]}
            )
            == "A & { x?: string }"
        )
        assert resolver.type_of({"allOf": [{"oneOf": [ref("A"), ref("B")]}, ref("C")]}) == (
            "(A | B) & C"
        )
        assert resolver.type_of({"const": "fixed"}) == "'fixed'"


class TestInterfaces:
    """Тесты интерфейсов именованных схем"""

    def test_properties_sorted_with_parent_nullability(self):
        """Тест сортировки свойств и nullable родителя"""
        schema = {
            "type": "object",
            "nullable": True,
            "required": ["id"],
            "properties": {
                "tags": {"type": "array", "items": {"type": "string"}},
                "name": {"type": "string", "nullable": False},
                "id": {"type": "string"},
            },
        }
        resolver = TypeResolver(make_graph({"Item": schema}))

        assert str(resolver.interface("Item", schema)) == (
            "export interface Item {\n"
            "  id: string;\n"
            "  name?: string | null;\n"
            "  tags?: string[] | null;\n"
            "}"
        )

    def test_property_nullability_ignored_outside_embedded(self):
        """Тест: nullable свойства без nullable родителя не добавляет null"""
        schema = {"type": "object", "properties": {"name": {"type": "string", "nullable": True}}}
        resolver = TypeResolver(make_graph({"Item": schema}))

        assert "name?: string;" in str(resolver.interface("Item", schema))

    def test_embedded_promotion(self):
        """Тест подъема свойств _embedded на верхний уровень"""
        schemas = {
            "Item": {"type": "object", "properties": {"id": {"type": "string"}}},
            "Owner": {"type": "object", "nullable": True, "properties": {}},
            "ItemList": {
                "type": "object",
                "properties": {
                    "total": {"type": "integer"},
                    "_embedded": {
                        "type": "object",
                        "properties": {
                            "items": {"type": "array", "items": ref("Item")},
                            "owner": ref("Owner"),
                        },
                    },
                },
            },
        }
        graph = make_graph(schemas)
        rendered = str(TypeResolver(graph).interface("ItemList", schemas["ItemList"]))

        assert "_embedded" not in rendered
        assert "embedded" not in rendered
        assert rendered == (
            "export interface ItemList {\n"
            "  total?: number;\n"
            "  items?: Item[];\n"
            "  owner?: Owner | null;\n"
            "}"
        )

    def test_embedded_uses_own_required_list(self):
        """Тест required из схемы _embedded"""
        schema = {
            "type": "object",
            "nullable": True,
            "properties": {
                "_embedded": {
                    "type": "object",
                    "required": ["items"],
                    "properties": {"items": {"type": "array", "items": ref("Item")}},
                }
            },
        }
        rendered = str(TypeResolver(make_graph({"Item": {}})).interface("List", schema))

        assert "  items: Item[];" in rendered

    def test_embedded_reference(self):
        """Тест _embedded через $ref"""
        schemas = {
            "Embedded": {"type": "object", "properties": {"child_nodes": {"type": "string"}}},
            "Node": {"type": "object", "properties": {"_embedded": ref("Embedded")}},
        }
        rendered = str(TypeResolver(make_graph(schemas)).interface("Node", schemas["Node"]))

        assert "childNodes?: string;" in rendered

    def test_unresolvable_embedded_is_fatal(self):
        """Тест ошибки при ненайденной схеме _embedded"""
        schemas = {"Node": {"type": "object", "properties": {"_embedded": ref("Missing")}}}
        generator = TypeGenerator(make_graph(schemas))

        with pytest.raises(UnresolvedReferenceError):
            generator.generate(generator.get_type_definitions())


class TestTypeGenerator:
    """Тесты генерации types.ts"""

    def test_named_definitions(self):
        """Тест enum, алиасов и интерфейсов"""
        schemas = {
            "Status": {"type": "string", "enum": ["active", "in_review"]},
            "Items": {"type": "array", "items": ref("Item")},
            "Alias": ref("Item"),
            "Item": {"type": "object", "properties": {"status": ref("Status")}},
        }
        generator = TypeGenerator(make_graph(schemas))
        definitions = generator.get_type_definitions()
        types_ts = str(generator.generate(definitions))

        assert [d.name for d in definitions] == ["Alias", "Item", "Items", "Status"]
        assert [d.is_interface for d in definitions] == [False, True, False, False]
        assert types_ts.startswith("// Auto-generated TypeScript types\n")
        assert 'export type Status = "active" | "in_review";' in types_ts
        assert "export type Items = Item[];" in types_ts
        assert "export type Alias = Item;" in types_ts
        assert "export interface Item {\n  status?: Status;\n}" in types_ts

    def test_request_definitions(self):
        """Тест типов inline тел запросов"""
        body = {
            "type": "object",
            "required": ["name"],
            "properties": {"name": {"type": "string"}},
        }
        paths = {
            "/items": {
                "post": {
                    "operationId": "createItem",
                    "requestBody": {"content": {"application/json": {"schema": body}}},
                    "responses": {},
                },
                "put": {
                    "operationId": "replaceItems",
                    "requestBody": {"content": {"application/json": {"schema": ref("Item")}}},
                    "responses": {},
                },
            },
            "/uploads": {
                "post": {
                    "operationId": "upload",
                    "requestBody": {
                        "content": {
                            "application/json": {"schema": {"type": "object"}},
                            "multipart/form-data": {
                                "schema": {
                                    "type": "object",
                                    "properties": {"file": {"type": "string", "format": "binary"}},
                                }
                            },
                        }
                    },
                    "responses": {},
                }
            },
        }
        generator = TypeGenerator(make_graph({"Item": {"type": "object"}}, paths))
        definitions = generator.get_type_definitions()
        types_ts = str(generator.generate(definitions))

        assert [d.name for d in definitions] == ["Item", "CreateItemRequest", "UploadRequest"]
        assert "export interface CreateItemRequest {\n  name: string;\n}" in types_ts
        assert "export interface UploadRequest {\n  file?: Blob;\n}" in types_ts
