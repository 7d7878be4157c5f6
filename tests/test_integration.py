"""End-to-end conversion through the command line."""

import json

from click.testing import CliRunner

from openapi_downgrade.cli import main

SINGLE_OPERATION = """\
openapi: 3.1.0
info:
  title: Users
  version: "2.0"
servers:
  - url: https://api.example.com
paths:
  /api/users/{id}:
    put:
      parameters:
        - name: id
          in: path
          required: true
          schema:
            type: integer
      requestBody:
        content:
          application/json:
            schema:
              $ref: "#/components/schemas/User"
            examples:
              alice:
                value: {id: 1, name: Alice, nickname: Al}
              bob:
                value: {id: 2, name: Bob}
      responses:
        "200":
          description: Updated
          content:
            application/json:
              schema:
                $ref: "#/components/schemas/User"
components:
  schemas:
    User:
      type: object
      properties:
        id:
          type: integer
        name:
          type: string
        nickname:
          type: [string, "null"]
"""


class TestEndToEnd:
    def test_single_file_with_named_examples(self, tmp_path):
        source = tmp_path / "users.yaml"
        source.write_text(SINGLE_OPERATION, encoding="utf-8")

        runner = CliRunner()
        result = runner.invoke(main, ["-s", str(source), "-g"])

        assert result.exit_code == 0
        output = tmp_path / "users.swagger.json"
        assert output.exists()

        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["swagger"] == "2.0"
        assert data["host"] == "api.example.com"

        op = data["paths"]["/api/users/{id}"]["put"]
        assert op["operationId"] == "putUsersById"
        assert op["parameters"][0] == {"name": "id", "in": "path", "required": True, "type": "integer"}
        assert op["parameters"][1]["schema"] == {"$ref": "#/definitions/User"}

        user = data["definitions"]["User"]
        assert user["example"] == {"id": 1, "name": "Alice", "nickname": "Al"}
        assert user["properties"]["nickname"] == {"type": "string", "x-nullable": True}

    def test_folder_aborts_on_first_invalid_file(self, tmp_path):
        src = tmp_path / "specs"
        src.mkdir()
        (src / "1_first.yaml").write_text(SINGLE_OPERATION, encoding="utf-8")
        (src / "2_broken.yaml").write_text("openapi: 3.0.0\npaths: {}\n", encoding="utf-8")
        (src / "3_third.yaml").write_text(SINGLE_OPERATION, encoding="utf-8")
        out = tmp_path / "out"

        runner = CliRunner()
        result = runner.invoke(main, ["-s", str(src), "-o", str(out)])

        assert result.exit_code == 1
        assert [p.name for p in out.iterdir()] == ["1_first.swagger.json"]
