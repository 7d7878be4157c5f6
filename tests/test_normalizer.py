from pathlib import Path

from openapi_downgrade.document.model import Document
from openapi_downgrade.document.reader import load
from openapi_downgrade.transform.normalizer import normalize

FIXTURES = Path(__file__).parent / "fixtures"


def _petstore() -> Document:
    with (FIXTURES / "petstore.yaml").open("rb") as stream:
        return load(stream).document


def _doc(paths: dict, components: dict | None = None) -> Document:
    data = {"openapi": "3.0.3", "info": {"title": "t", "version": "1"}, "paths": paths}
    if components is not None:
        data["components"] = components
    return Document.model_validate(data)


class TestOperationIds:
    def test_missing_ids_generated(self):
        doc = _petstore()
        normalize(doc, generate_operation_ids=True)
        assert doc.paths["/pets"].get.operation_id == "getPetsBy"
        assert doc.paths["/pets"].post.operation_id == "postPets"

    def test_existing_id_not_overwritten(self):
        doc = _petstore()
        normalize(doc, generate_operation_ids=True)
        assert doc.paths["/pets/{petId}"].get.operation_id == "showPetById"

    def test_ids_untouched_when_not_requested(self):
        doc = _petstore()
        normalize(doc)
        assert doc.paths["/pets"].get.operation_id is None

    def test_whitespace_id_replaced(self):
        doc = _doc({"/api/users/{id}": {"get": {
            "operationId": "   ",
            "parameters": [{"name": "id", "in": "path", "required": True}],
            "responses": {},
        }}})
        normalize(doc, generate_operation_ids=True)
        assert doc.paths["/api/users/{id}"].get.operation_id == "getUsersById"

    def test_referenced_path_parameter_named(self):
        doc = _doc(
            {"/api/pets/{petId}": {"get": {
                "parameters": [{"$ref": "#/components/parameters/PetId"}],
                "responses": {"200": {"description": "ok"}},
            }}},
            components={"parameters": {"PetId": {
                "name": "petId", "in": "path", "required": True, "schema": {"type": "string"},
            }}},
        )
        normalize(doc, generate_operation_ids=True)
        assert doc.paths["/api/pets/{petId}"].get.operation_id == "getPetsByPetId"
        assert doc.paths["/api/pets/{petId}"].get.parameters[0].ref == "#/components/parameters/PetId"


class TestExamples:
    def test_response_examples_collapsed(self):
        doc = _petstore()
        normalize(doc)
        content = doc.paths["/pets"].get.responses["200"].content["application/json"]
        assert content.example == [{"id": 1, "name": "Rex"}]
        assert list(content.examples) == ["dogs", "cats"]

    def test_parameter_content_examples_collapsed(self):
        doc = _doc({"/search": {"get": {
            "parameters": [{
                "name": "filter",
                "in": "query",
                "content": {"application/json": {
                    "schema": {"type": "object"},
                    "examples": {"first": {"value": {"a": 1}}, "second": {"value": {"b": 2}}},
                }},
            }],
            "responses": {},
        }}})
        normalize(doc)
        content = doc.paths["/search"].get.parameters[0].content["application/json"]
        assert content.example == {"a": 1}

    def test_request_body_example_backfills_shared_schema(self):
        doc = _petstore()
        normalize(doc)
        body = doc.paths["/pets"].post.request_body.content["application/json"]
        assert body.example == {"id": 10, "name": "Fido"}
        assert doc.components.schemas["Pet"].example == {"id": 10, "name": "Fido"}
        # the schema is shared, not copied
        assert doc.resolve_schema(body.schema_) is doc.components.schemas["Pet"]

    def test_inline_schema_backfilled(self):
        doc = _doc({"/pets": {"post": {
            "requestBody": {"content": {"application/json": {
                "schema": {"type": "object"},
                "example": {"name": "Rex"},
            }}},
            "responses": {},
        }}})
        normalize(doc)
        schema = doc.paths["/pets"].post.request_body.content["application/json"].schema_
        assert schema.example == {"name": "Rex"}

    def test_existing_schema_example_kept(self):
        doc = _doc(
            {"/pets": {"post": {
                "requestBody": {"content": {"application/json": {
                    "schema": {"$ref": "#/components/schemas/Pet"},
                    "examples": {"a": {"value": "Y"}},
                }}},
                "responses": {},
            }}},
            {"schemas": {"Pet": {"type": "string", "example": "X"}}},
        )
        normalize(doc)
        assert doc.components.schemas["Pet"].example == "X"
        assert doc.paths["/pets"].post.request_body.content["application/json"].example == "Y"

    def test_referenced_request_body_resolved(self):
        doc = _doc(
            {"/pets": {"post": {
                "requestBody": {"$ref": "#/components/requestBodies/PetBody"},
                "responses": {},
            }}},
            {"requestBodies": {"PetBody": {"content": {"application/json": {
                "schema": {"type": "object"},
                "examples": {"a": {"value": {"name": "Rex"}}},
            }}}}},
        )
        normalize(doc)
        content = doc.components.request_bodies["PetBody"].content["application/json"]
        assert content.example == {"name": "Rex"}
        assert content.schema_.example == {"name": "Rex"}


class TestTraversal:
    def test_operation_without_children_skipped(self):
        doc = _doc({"/health": {"get": {}}})
        normalize(doc, generate_operation_ids=True)
        assert doc.paths["/health"].get.operation_id == "getHealth"
        assert doc.paths["/health"].get.responses is None

    def test_idempotent(self):
        once = _petstore()
        normalize(once, generate_operation_ids=True)
        twice = _petstore()
        normalize(twice, generate_operation_ids=True)
        normalize(twice, generate_operation_ids=True)
        assert once.dump() == twice.dump()

    def test_structure_preserved(self):
        doc = _petstore()
        before = {path: [m for m, _ in item.operations()] for path, item in doc.paths.items()}
        normalize(doc, generate_operation_ids=True)
        after = {path: [m for m, _ in item.operations()] for path, item in doc.paths.items()}
        assert list(before) == list(after)
        assert before == after

    def test_log_messages_in_traversal_order(self):
        messages = []
        doc = _petstore()
        normalize(doc, generate_operation_ids=True, log=messages.append)
        assert messages == [
            "[OpenAPIv2 compatibility] Setting example from first of multiple OpenAPIv3 examples "
            "for /pets GET response 200 application/json",
            "[OpenAPIv2 compatibility] Setting example from first of multiple OpenAPIv3 examples "
            "for /pets POST requestBody application/json",
            "[OpenAPIv2 compatibility] Setting type example from sample requestBody example "
            "for Pet from postPets",
        ]

    def test_logging_does_not_change_result(self):
        quiet = _petstore()
        normalize(quiet, generate_operation_ids=True)
        noisy = _petstore()
        normalize(noisy, generate_operation_ids=True, log=lambda message: None)
        assert quiet.dump() == noisy.dump()
