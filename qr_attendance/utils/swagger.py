"""Swagger/OpenAPI configuration for the application."""
from flask_swagger_ui import get_swaggerui_blueprint

# Swagger UI configuration
SWAGGER_URL = '/api/docs'
API_URL = '/api/swagger.json'

def get_swagger_blueprint():
    """Create and return swagger UI blueprint."""
    swaggerui_blueprint = get_swaggerui_blueprint(
        SWAGGER_URL,
        API_URL,
        config={
            'app_name': "QR Attendance API",
            'defaultModelsExpandDepth': -1,
            'docExpansion': 'list',
            'filter': True,
            'supportedSubmitMethods': ['get', 'post', 'put', 'delete'],
            'validatorUrl': None,
        }
    )
    return swaggerui_blueprint

def _json_body(schema_ref: str) -> dict:
    return {
        "required": True,
        "content": {"application/json": {"schema": {"$ref": schema_ref}}}
    }

def _responses(*codes) -> dict:
    descriptions = {
        200: "Success",
        201: "Created",
        400: "Validation or attendance rule error",
        401: "Missing, invalid or expired token",
        403: "Admin access required",
        404: "Not found",
        409: "Duplicate QR code or registration number",
    }
    return {str(code): {"description": descriptions[code]} for code in codes}

def generate_swagger_spec():
    """Generate OpenAPI/Swagger specification."""
    secured = [{"bearerAuth": []}]
    attendee_id = [{"name": "attendee_id", "in": "path", "required": True, "schema": {"type": "integer"}}]

    return {
        "openapi": "3.0.0",
        "info": {
            "title": "QR Attendance API",
            "description": "Attendee roster, QR check-in/check-out and attendance reporting",
            "version": "1.0.0"
        },
        "servers": [
            {
                "url": "http://127.0.0.1:5000",
                "description": "Development server"
            }
        ],
        "components": {
            "securitySchemes": {
                "bearerAuth": {
                    "type": "http",
                    "scheme": "bearer",
                    "bearerFormat": "JWT"
                }
            },
            "schemas": {
                "Login": {
                    "type": "object",
                    "required": ["username", "password"],
                    "properties": {
                        "username": {"type": "string"},
                        "password": {"type": "string"}
                    }
                },
                "Register": {
                    "type": "object",
                    "required": ["username", "password"],
                    "properties": {
                        "username": {"type": "string"},
                        "password": {"type": "string"},
                        "email": {"type": "string", "format": "email"},
                        "role": {"type": "string", "enum": ["admin", "user"]}
                    }
                },
                "Attendee": {
                    "type": "object",
                    "required": ["fullName", "universityRegNo", "branch", "qrcodeNumber"],
                    "properties": {
                        "fullName": {"type": "string"},
                        "universityRegNo": {"type": "string"},
                        "branch": {"type": "string"},
                        "qrcodeNumber": {"type": "string"},
                        "email": {"type": "string", "format": "email"},
                        "mobileNo": {"type": "string"}
                    }
                },
                "Mark": {
                    "type": "object",
                    "required": ["qrCode", "type"],
                    "properties": {
                        "qrCode": {"type": "string"},
                        "type": {"type": "string", "enum": ["in", "out"]}
                    }
                }
            }
        },
        "paths": {
            "/api/health": {
                "get": {"tags": ["System"], "summary": "Liveness probe", "responses": _responses(200)}
            },
            "/api/auth/login": {
                "post": {
                    "tags": ["Auth"], "summary": "Operator login",
                    "requestBody": _json_body("#/components/schemas/Login"),
                    "responses": _responses(200, 400, 401)
                }
            },
            "/api/auth/verify": {
                "get": {"tags": ["Auth"], "summary": "Verify token", "security": secured,
                        "responses": _responses(200, 401)}
            },
            "/api/auth/register": {
                "post": {
                    "tags": ["Auth"], "summary": "Create operator account", "security": secured,
                    "requestBody": _json_body("#/components/schemas/Register"),
                    "responses": _responses(201, 400, 401, 403, 409)
                }
            },
            "/api/users": {
                "get": {"tags": ["Users"], "summary": "List operators", "security": secured,
                        "responses": _responses(200, 401, 403)}
            },
            "/api/users/profile": {
                "get": {"tags": ["Users"], "summary": "Own profile", "security": secured,
                        "responses": _responses(200, 401)}
            },
            "/api/attendance/attendees": {
                "get": {"tags": ["Attendees"], "summary": "List attendees", "security": secured,
                        "responses": _responses(200, 401)}
            },
            "/api/attendance/attendee": {
                "post": {
                    "tags": ["Attendees"], "summary": "Create attendee or refresh its QR code",
                    "security": secured,
                    "requestBody": _json_body("#/components/schemas/Attendee"),
                    "responses": _responses(200, 201, 400, 401, 403, 409)
                }
            },
            "/api/attendance/attendee/{attendee_id}": {
                "get": {"tags": ["Attendees"], "summary": "Attendee with recent records",
                        "security": secured, "parameters": attendee_id,
                        "responses": _responses(200, 401, 404)},
                "put": {"tags": ["Attendees"], "summary": "Update attendee", "security": secured,
                        "parameters": attendee_id,
                        "requestBody": _json_body("#/components/schemas/Attendee"),
                        "responses": _responses(200, 400, 401, 403, 404, 409)},
                "delete": {"tags": ["Attendees"], "summary": "Delete attendee and its records",
                           "security": secured, "parameters": attendee_id,
                           "responses": _responses(200, 401, 403, 404)}
            },
            "/api/attendance/attendee/{attendee_id}/qrcode": {
                "get": {"tags": ["Attendees"], "summary": "QR code PNG", "security": secured,
                        "parameters": attendee_id, "responses": _responses(200, 401, 404)}
            },
            "/api/attendance/record/{record_id}": {
                "delete": {
                    "tags": ["Attendance"], "summary": "Delete attendance record", "security": secured,
                    "parameters": [{"name": "record_id", "in": "path", "required": True,
                                    "schema": {"type": "integer"}}],
                    "responses": _responses(200, 401, 403, 404)
                }
            },
            "/api/attendance/mark": {
                "post": {
                    "tags": ["Attendance"], "summary": "Mark check-in or check-out", "security": secured,
                    "requestBody": _json_body("#/components/schemas/Mark"),
                    "responses": _responses(201, 400, 401, 404)
                }
            },
            "/api/attendance/stats": {
                "get": {"tags": ["Reports"], "summary": "Attendance statistics", "security": secured,
                        "responses": _responses(200, 401)}
            },
            "/api/attendance/history": {
                "get": {"tags": ["Reports"], "summary": "Latest attendance events", "security": secured,
                        "responses": _responses(200, 401)}
            },
            "/api/attendance/import": {
                "post": {
                    "tags": ["Import"], "summary": "Import attendees from CSV", "security": secured,
                    "requestBody": {
                        "required": True,
                        "content": {"multipart/form-data": {"schema": {
                            "type": "object",
                            "properties": {"file": {"type": "string", "format": "binary"}}
                        }}}
                    },
                    "responses": _responses(200, 400, 401, 403)
                }
            },
            "/api/attendance/import/template": {
                "get": {"tags": ["Import"], "summary": "CSV import template", "security": secured,
                        "responses": _responses(200, 401, 403)}
            }
        }
    }
