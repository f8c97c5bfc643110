"""
Интеграционные тесты для генератора
"""

import os
import tempfile

from sdk_ts_gen.cli import _save_project_files
from sdk_ts_gen.generator import SdkGenerator
from sdk_ts_gen.internal.parser import load_document, read_source

TESTDATA = os.path.join(os.path.dirname(__file__), "testdata")


def load_testdata(name, **kwargs):
    data, base_uri = read_source(os.path.join(TESTDATA, name))
    return load_document(data, base_uri=base_uri, source=name, **kwargs)


class TestIntegration:
    """Интеграционные тесты"""

    def test_complete_generation_workflow(self):
        """Тест полного процесса генерации"""
        complex_spec = {
            "openapi": "3.0.0",
            "info": {"title": "Complex API", "version": "2.0.0"},
            "servers": [{"url": "https://shop.example.com/api"}],
            "components": {
                "schemas": {
                    "User": {
                        "type": "object",
                        "properties": {
                            "id": {"type": "integer"},
                            "username": {"type": "string"},
                            "created_at": {"type": "string", "format": "date-time"},
                            "role": {"$ref": "#/components/schemas/UserRole"},
                        },
                        "required": ["id", "username"],
                    },
                    "UserRole": {"type": "string", "enum": ["admin", "user", "moderator"]},
                    "APIError": {
                        "type": "object",
                        "properties": {
                            "code": {"type": "integer"},
                            "message": {"type": "string"},
                        },
                    },
                    "LoginResponse": {
                        "type": "object",
                        "properties": {
                            "access_token": {"type": "string"},
                            "user": {"$ref": "#/components/schemas/User"},
                        },
                    },
                }
            },
            "paths": {
                "/auth/login": {
                    "post": {
                        "operationId": "login",
                        "summary": "User login",
                        "requestBody": {
                            "content": {
                                "application/json": {
                                    "schema": {
                                        "type": "object",
                                        "properties": {
                                            "username": {"type": "string"},
                                            "password": {"type": "string"},
                                        },
                                    }
                                }
                            }
                        },
                        "responses": {
                            "200": {
                                "description": "Successful login",
                                "content": {
                                    "application/json": {
                                        "schema": {"$ref": "#/components/schemas/LoginResponse"}
                                    }
                                },
                            }
                        },
                    }
                },
                "/users": {
                    "get": {
                        "operationId": "listUsers",
                        "parameters": [
                            {
                                "name": "filter[created_at]",
                                "in": "query",
                                "x-gocart-sdk-type": "DateRange",
                                "schema": {"type": "string"},
                            },
                            {
                                "name": "sort",
                                "in": "query",
                                "schema": {
                                    "type": "array",
                                    "items": {"type": "string", "enum": ["username", "-username"]},
                                },
                            },
                        ],
                        "responses": {
                            "200": {
                                "description": "Users",
                                "content": {
                                    "application/json": {
                                        "schema": {
                                            "type": "array",
                                            "items": {"$ref": "#/components/schemas/User"},
                                        }
                                    }
                                },
                            }
                        },
                    }
                },
                "/users/{user_id}/avatar": {
                    "get": {
                        "operationId": "getUserAvatar",
                        "parameters": [
                            {
                                "name": "user_id",
                                "in": "path",
                                "required": True,
                                "schema": {"type": "integer"},
                            }
                        ],
                        "responses": {
                            "200": {"description": "Avatar", "content": {"image/png": {}}}
                        },
                    }
                },
            },
        }

        project = SdkGenerator(load_document(complex_spec)).generate()

        with tempfile.TemporaryDirectory() as temp_dir:
            target = os.path.join(temp_dir, "src")
            _save_project_files(project, target)

            assert sorted(os.listdir(target)) == ["params.ts", "sdk.ts", "types.ts"]

            files = {}
            for file_name in os.listdir(target):
                with open(os.path.join(target, file_name), encoding="utf-8") as f:
                    files[file_name] = f.read()

        sdk_ts = files["sdk.ts"]
        assert "public async login(req: LoginRequest): Promise<LoginResponse> {" in sdk_ts
        assert "public async listUsers(params: ListUsersParams = {}): Promise<User[]> {" in sdk_ts
        assert (
            "public async getUserAvatar(userId: number, params: GetUserAvatarParams = {}): "
            "Promise<Blob> {"
        ) in sdk_ts
        assert "import { ApiError } from './error';" in sdk_ts
        assert "import {\n  APIError,\n  LoginRequest,\n  LoginResponse,\n  User,\n} from './types';" in sdk_ts
        assert "constructor(baseUrl: string = 'https://shop.example.com/api') {" in sdk_ts
        # DateRange не импортируется: он не упоминается в типах sdk.ts
        assert "DateRange" not in sdk_ts.split("export class")[0]

        types_ts = files["types.ts"]
        assert 'export type UserRole = "admin" | "user" | "moderator";' in types_ts
        assert "  role?: UserRole;" in types_ts
        assert "export interface LoginRequest {" in types_ts

        params_ts = files["params.ts"]
        assert "export type ListUsersParamsSortOption = 'username' | '-username';" in params_ts
        assert "createdAt?: DateRange;" in params_ts

    def test_external_references(self):
        """Тест внешних $ref через весь конвейер"""
        project = SdkGenerator(load_testdata("external_main.yaml")).generate()

        types_ts = str(project.get_file("types.ts"))
        sdk_ts = str(project.get_file("sdk.ts"))

        assert "export interface Pet {\n  name: string;\n  tag?: string;\n}" in types_ts
        assert "export type Pet = Pet;" not in types_ts
        assert "public async getPet(petId: number, params: GetPetParams = {}): Promise<Pet> {" in sdk_ts
        assert "const url = `${this.baseUrl}/pets/${petId}`;" in sdk_ts

    def test_date_range_document(self):
        """Тест документа с фильтрами по датам"""
        project = SdkGenerator(load_testdata("date_range_input.yaml")).generate()

        sdk_ts = str(project.get_file("sdk.ts"))
        types_ts = str(project.get_file("types.ts"))

        assert 'const dateRange = params.filter["createdAt"];' in sdk_ts
        assert "queryString.append('page[size]', String(params.page[\"size\"]));" in sdk_ts
        assert "export interface ItemList {\n  items?: Item[];\n}" in types_ts
        assert "createdAt?: string;" in types_ts
