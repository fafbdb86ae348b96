"""Tests for OpenAPI operation to MCP tool synthesis."""

import logging

import pytest

from openapi_mcp_server.errors import ConfigurationError
from openapi_mcp_server.openapi import ToolSynthesizer, with_string_fallback
from openapi_mcp_server.openapi.synthesizer import ToolNamer

DEFS_PREFIX = "#/$defs/"

MUTUAL_SCHEMAS = {
    "A": {"type": "object", "properties": {"b": {"$ref": "#/components/schemas/B"}}},
    "B": {"type": "object", "properties": {"a": {"$ref": "#/components/schemas/A"}}},
}


def _document(paths: dict, schemas: dict | None = None, title: str = "Test API") -> dict:
    document = {"openapi": "3.0.0", "info": {"title": title, "version": "1"}, "paths": paths}
    if schemas is not None:
        document["components"] = {"schemas": schemas}
    return document


def _single_op(operation: dict, method: str = "post", path: str = "/things") -> dict:
    return _document({path: {method: {"responses": {}, **operation}}})


def _refs(node):
    """Yield every $ref string anywhere under node."""
    if isinstance(node, dict):
        ref = node.get("$ref")
        if isinstance(ref, str):
            yield ref
        for value in node.values():
            yield from _refs(value)
    elif isinstance(node, list):
        for item in node:
            yield from _refs(item)


def _mutual_document() -> dict:
    return _document(
        {
            "/a": {
                "post": {
                    "operationId": "createA",
                    "requestBody": {
                        "content": {"application/json": {"schema": {"$ref": "#/components/schemas/A"}}}
                    },
                    "responses": {
                        "200": {
                            "description": "B",
                            "content": {"application/json": {"schema": {"$ref": "#/components/schemas/B"}}},
                        }
                    },
                }
            },
            "/b": {
                "put": {
                    "operationId": "updateB",
                    "requestBody": {
                        "content": {
                            "application/json": {
                                "schema": {
                                    "type": "object",
                                    "properties": {
                                        "a": {"$ref": "#/components/schemas/A"},
                                        "items": {"type": "array", "items": {"$ref": "#/components/schemas/B"}},
                                    },
                                }
                            }
                        }
                    },
                    "responses": {},
                }
            },
        },
        schemas=MUTUAL_SCHEMAS,
    )


class TestCatalogue:
    """Tests for ToolSynthesizer.build."""

    def test_tools_and_lookup_agree(self, petstore):
        """Every tool has a lookup entry under its namespaced name."""
        catalogue = ToolSynthesizer(petstore).build()
        names = [catalogue.external_name(tool) for tool in catalogue.tools]
        assert names == list(catalogue.lookup)
        assert set(names) == {"API-getPet", "API-deletePet", "API-listPets", "API-createPet"}

    def test_lookup_entry_carries_method_and_path(self, petstore):
        entry = ToolSynthesizer(petstore).build().get("API-getPet")
        assert entry.method.value == "get"
        assert entry.path == "/pets/{petId}"
        assert entry.as_dict()["operationId"] == "getPet"
        assert entry.as_dict()["method"] == "get"

    def test_namespace_can_be_disabled(self, petstore):
        catalogue = ToolSynthesizer(petstore, namespace=None).build()
        assert "getPet" in catalogue.lookup

    def test_non_operation_keys_ignored(self):
        """Path-item keys other than HTTP verbs produce no tools."""
        document = _document(
            {"/x": {"summary": "x", "parameters": [], "get": {"operationId": "getX", "responses": {}}}}
        )
        assert [tool.name for tool in ToolSynthesizer(document).build().tools] == ["getX"]

    def test_operation_without_id_skipped(self, caplog):
        """Unnamed operations are logged and skipped."""
        caplog.set_level(logging.WARNING, logger="openapi_mcp_server")
        document = _document(
            {"/x": {"get": {"responses": {}}, "post": {"operationId": "createX", "responses": {}}}}
        )
        catalogue = ToolSynthesizer(document).build()
        assert [tool.name for tool in catalogue.tools] == ["createX"]
        assert "Operation without operationId at get /x" in caplog.text

    def test_empty_document(self):
        assert len(ToolSynthesizer({"openapi": "3.0.0"}).build()) == 0


class TestNaming:
    """Tool names are unique and fit the length limit."""

    def test_long_name_without_namespace(self):
        """A 65-character id is truncated to 59 characters plus -0001."""
        document = _single_op({"operationId": "a" * 65})
        catalogue = ToolSynthesizer(document, namespace=None).build()
        assert len(catalogue.tools) == 1
        assert catalogue.tools[0].name == "a" * 59 + "-0001"

    def test_long_name_with_namespace_fits(self):
        """The namespace prefix counts against the 64-character limit."""
        document = _single_op({"operationId": "a" * 65})
        catalogue = ToolSynthesizer(document).build()
        (name,) = catalogue.lookup
        assert len(name) <= 64
        assert name == "API-" + "a" * 55 + "-0001"

    def test_short_name_unchanged(self, petstore):
        assert ToolSynthesizer(petstore).build().tools[0].name == "getPet"

    def test_truncation_collisions_get_distinct_suffixes(self):
        """Ids sharing a long prefix stay distinct after truncation."""
        document = _document(
            {
                "/a": {"get": {"operationId": "x" * 70 + "A", "responses": {}}},
                "/b": {"get": {"operationId": "x" * 70 + "B", "responses": {}}},
            }
        )
        names = [tool.name for tool in ToolSynthesizer(document, namespace=None).build().tools]
        assert names == ["x" * 59 + "-0001", "x" * 59 + "-0002"]

    def test_duplicate_ids_made_unique(self):
        document = _document(
            {
                "/a": {"get": {"operationId": "dup", "responses": {}}},
                "/b": {"get": {"operationId": "dup", "responses": {}}},
            }
        )
        catalogue = ToolSynthesizer(document).build()
        assert list(catalogue.lookup) == ["API-dup", "API-dup-0001"]

    def test_counter_scoped_to_one_build(self):
        """Rebuilding restarts the suffix counter."""
        synthesizer = ToolSynthesizer(_single_op({"operationId": "a" * 65}), namespace=None)
        assert synthesizer.build().tools[0].name == synthesizer.build().tools[0].name

    def test_unusual_characters_warn(self, caplog):
        caplog.set_level(logging.WARNING, logger="openapi_mcp_server")
        catalogue = ToolSynthesizer(_single_op({"operationId": "get pet/{id}"})).build()
        assert "API-get pet/{id}" in catalogue.lookup
        assert "has characters some MCP clients reject" in caplog.text

    def test_namespace_too_long_rejected(self):
        """A namespace leaving no room for a name and suffix is refused."""
        with pytest.raises(ConfigurationError, match="is too long"):
            ToolSynthesizer(_single_op({"operationId": "x"}), namespace="n" * 58)

    def test_longest_namespace_still_names_tools(self):
        namespace = "n" * 57
        catalogue = ToolSynthesizer(_single_op({"operationId": "a" * 7}), namespace=namespace).build()
        assert catalogue.tools[0].name == "a-0001"
        assert f"{namespace}-a-0001" in catalogue.lookup
        assert len(f"{namespace}-a-0001") == 64

    def test_namer_counter_only_grows(self):
        namer = ToolNamer(10)
        assert namer.assign("short") == "short"
        assert namer.assign("b" * 11) == "bbbbb-0001"
        assert namer.assign("c" * 11) == "ccccc-0002"


class TestInputSchema:
    """Tests for merged input schemas."""

    def test_parameters_become_properties(self, petstore):
        tool = ToolSynthesizer(petstore).build().get("API-getPet").tool
        assert tool.input_schema["type"] == "object"
        assert tool.input_schema["properties"]["petId"] == {"type": "integer", "description": "The ID of the pet"}
        assert tool.input_schema["required"] == ["petId"]

    def test_defs_attached_to_every_tool(self, petstore):
        """Each tool carries all component schemas under $defs."""
        catalogue = ToolSynthesizer(petstore).build()
        for tool in catalogue.tools:
            assert set(tool.input_schema["$defs"]) == {"Pet", "Owner"}
        first, second = catalogue.tools[0], catalogue.tools[1]
        assert first.input_schema["$defs"] is not second.input_schema["$defs"]

    def test_defs_self_contained(self, petstore, upload_document):
        """Every local $ref in a tool schema names an entry of that schema's own $defs."""
        for document in (petstore, upload_document, _mutual_document()):
            for tool in ToolSynthesizer(document).build().tools:
                for schema in (tool.input_schema, tool.return_schema):
                    if schema is None:
                        continue
                    for ref in _refs(schema):
                        assert ref.startswith(DEFS_PREFIX), (tool.name, ref)
                        assert ref[len(DEFS_PREFIX) :] in schema["$defs"], (tool.name, ref)

    def test_mutual_cycle_defs(self):
        """A -> B -> A gives two $defs entries pointing at each other."""
        tool = ToolSynthesizer(_mutual_document()).build().get("API-createA").tool
        defs = tool.input_schema["$defs"]
        assert defs["A"]["properties"]["b"] == {"$ref": "#/$defs/B"}
        assert defs["B"]["properties"]["a"] == {"$ref": "#/$defs/A"}
        assert set(tool.return_schema["$defs"]) == {"A", "B"}

    def test_array_parameter_items_accept_strings(self, petstore):
        tags = ToolSynthesizer(petstore).build().get("API-listPets").tool.input_schema["properties"]["tags"]
        assert tags == {
            "type": "array",
            "items": {
                "anyOf": [
                    {"type": "string"},
                    {"type": "string"},
                    {"type": "object", "additionalProperties": True},
                ]
            },
        }

    def test_referenced_body_nested_under_body(self, petstore):
        """A $ref JSON body is not an object schema, so it becomes the body property."""
        schema = ToolSynthesizer(petstore).build().get("API-createPet").tool.input_schema
        assert schema["properties"]["body"] == {"anyOf": [{"$ref": "#/$defs/Pet"}, {"type": "string"}]}
        assert schema["required"] == ["body"]

    def test_object_body_properties_merge_with_fallback(self):
        """Object-valued body properties accept a JSON string alternative."""
        document = _single_op(
            {
                "operationId": "createThing",
                "requestBody": {
                    "content": {
                        "application/json": {
                            "schema": {
                                "type": "object",
                                "required": ["p"],
                                "properties": {"p": {"type": "object", "properties": {"x": {"type": "string"}}}},
                            }
                        }
                    }
                },
            }
        )
        schema = ToolSynthesizer(document).build().tools[0].input_schema
        assert schema["properties"]["p"] == {
            "anyOf": [
                {"type": "object", "properties": {"x": {"type": "string"}}, "additionalProperties": True},
                {"type": "string"},
            ]
        }
        assert schema["required"] == ["p"]

    def test_scalar_body_nested_under_body(self):
        document = _single_op(
            {
                "operationId": "setName",
                "requestBody": {"content": {"application/json": {"schema": {"type": "string"}}}},
            }
        )
        schema = ToolSynthesizer(document).build().tools[0].input_schema
        assert schema["properties"]["body"] == {"type": "string"}
        assert schema["required"] == ["body"]

    def test_multipart_preferred_and_binary_rewritten(self, upload_document):
        """Multipart properties merge in; binary fields become file paths."""
        schema = ToolSynthesizer(upload_document).build().tools[0].input_schema
        assert schema["properties"]["photo"] == {
            "type": "string",
            "format": "uri-reference",
            "description": "The photo (absolute paths to local files)",
        }
        assert schema["properties"]["caption"] == {"type": "string"}
        assert schema["properties"]["id"] == {"type": "integer"}
        assert schema["required"] == ["id", "photo"]

    def test_referenced_parameter_resolved(self):
        document = _single_op({"operationId": "op", "parameters": [{"$ref": "#/components/parameters/Limit"}]})
        document["components"] = {
            "parameters": {"Limit": {"name": "limit", "in": "query", "required": True, "schema": {"type": "integer"}}}
        }
        schema = ToolSynthesizer(document).build().tools[0].input_schema
        assert schema["properties"]["limit"] == {"type": "integer"}
        assert schema["required"] == ["limit"]

    def test_path_level_parameters_merged(self):
        """Path-item parameters apply unless the operation overrides them."""
        document = _document(
            {
                "/items/{id}": {
                    "parameters": [
                        {"name": "id", "in": "path", "required": True, "schema": {"type": "string"}},
                        {"name": "verbose", "in": "query", "schema": {"type": "boolean"}},
                    ],
                    "get": {
                        "operationId": "getItem",
                        "parameters": [{"name": "verbose", "in": "query", "schema": {"type": "integer"}}],
                        "responses": {},
                    },
                }
            }
        )
        properties = ToolSynthesizer(document).build().tools[0].input_schema["properties"]
        assert properties["id"] == {"type": "string"}
        assert properties["verbose"] == {"type": "integer"}


class TestDescription:
    """Tests for tool descriptions."""

    def test_summary_with_error_responses(self, petstore):
        tool = ToolSynthesizer(petstore).build().get("API-getPet").tool
        assert tool.description == "Get a pet by ID\nError Responses:\n404: Pet not found"

    def test_no_error_block_without_errors(self, petstore):
        assert ToolSynthesizer(petstore).build().get("API-listPets").tool.description == "List pets"

    def test_description_used_when_no_summary(self):
        document = _single_op({"operationId": "op", "description": "Longer text"})
        assert ToolSynthesizer(document).build().tools[0].description == "Longer text"

    def test_missing_text_is_empty(self, petstore):
        assert ToolSynthesizer(petstore).build().get("API-deletePet").tool.description == ""

    def test_notion_prefix(self):
        document = _document({"/x": {"get": {"operationId": "op", "summary": "Do it", "responses": {}}}}, title="Notion API")
        assert ToolSynthesizer(document).build().tools[0].description == "Notion | Do it"


class TestReturnSchema:
    """Tests for return schema extraction."""

    def test_top_level_ref_resolved_one_level(self, petstore):
        schema = ToolSynthesizer(petstore).build().get("API-getPet").tool.return_schema
        assert schema["type"] == "object"
        assert schema["properties"]["owner"] == {"$ref": "#/$defs/Owner"}
        assert set(schema["$defs"]) == {"Pet", "Owner"}
        assert schema["description"] == "Pet found"

    def test_array_response(self, petstore):
        schema = ToolSynthesizer(petstore).build().get("API-listPets").tool.return_schema
        assert schema["items"] == {"$ref": "#/$defs/Pet"}
        assert schema["description"] == "A list of pets"

    def test_no_content_gives_none(self, petstore):
        assert ToolSynthesizer(petstore).build().get("API-createPet").tool.return_schema is None

    def test_image_response(self):
        document = _single_op(
            {
                "operationId": "getPhoto",
                "responses": {"200": {"description": "Photo", "content": {"image/png": {}}}},
            },
            method="get",
        )
        assert ToolSynthesizer(document).build().tools[0].return_schema == {
            "type": "string",
            "format": "binary",
            "description": "Photo",
        }

    def test_other_content_is_string(self):
        document = _single_op(
            {
                "operationId": "getText",
                "responses": {"200": {"description": "Text", "content": {"text/plain": {}}}},
            },
            method="get",
        )
        assert ToolSynthesizer(document).build().tools[0].return_schema == {"type": "string", "description": "Text"}

    def test_only_error_responses_gives_none(self):
        document = _single_op({"operationId": "op", "responses": {"500": {"description": "Boom"}}})
        assert ToolSynthesizer(document).build().tools[0].return_schema is None

    def test_to_dict_includes_return_schema(self, petstore):
        tool = ToolSynthesizer(petstore).build().get("API-getPet").tool
        assert set(tool.to_dict()) == {"name", "description", "inputSchema", "returnSchema"}


class TestStringFallback:
    """Tests for with_string_fallback."""

    def test_scalars_unchanged(self):
        assert with_string_fallback({"type": "integer"}) == {"type": "integer"}

    def test_ref_wrapped(self):
        assert with_string_fallback({"$ref": "#/$defs/X"}) == {"anyOf": [{"$ref": "#/$defs/X"}, {"type": "string"}]}

    def test_composition_wrapped(self):
        schema = {"oneOf": [{"type": "string"}, {"type": "integer"}]}
        assert with_string_fallback(schema) == {"anyOf": [schema, {"type": "string"}]}

    def test_array_without_items_unchanged(self):
        assert with_string_fallback({"type": "array"}) == {"type": "array"}


class TestOtherFormats:
    """Tests for OpenAI and Anthropic tool formats."""

    def test_openai_tools(self, petstore):
        tools = ToolSynthesizer(petstore).to_openai_tools()
        get_pet = next(t for t in tools if t["function"]["name"] == "getPet")
        assert get_pet["type"] == "function"
        assert get_pet["function"]["description"] == "Get a pet by ID"
        assert get_pet["function"]["parameters"]["properties"]["petId"]["type"] == "integer"

    def test_anthropic_tools_have_no_string_fallback(self):
        document = _single_op(
            {
                "operationId": "createThing",
                "requestBody": {
                    "content": {
                        "application/json": {
                            "schema": {"type": "object", "properties": {"p": {"type": "object"}}}
                        }
                    }
                },
            }
        )
        (tool,) = ToolSynthesizer(document).to_anthropic_tools()
        assert tool["name"] == "createThing"
        assert tool["input_schema"]["properties"]["p"] == {"type": "object", "additionalProperties": True}
