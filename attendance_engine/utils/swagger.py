"""Swagger/OpenAPI configuration for the application."""

# Swagger UI configuration
SWAGGER_URL = '/api/docs'
API_URL = '/api/swagger.json'


def _json_body(schema):
    return {
        "required": True,
        "content": {"application/json": {"schema": schema}}
    }


def _responses(success_ref, *error_codes):
    responses = {
        "201": {
            "description": "Created",
            "content": {"application/json": {"schema": {"$ref": success_ref}}}
        }
    }
    for code in error_codes:
        responses[str(code)] = {
            "description": "Error",
            "content": {"application/json": {"schema": {"$ref": "#/components/schemas/Error"}}}
        }
    return responses


def generate_swagger_spec():
    """Generate OpenAPI/Swagger specification."""
    return {
        "openapi": "3.0.0",
        "info": {
            "title": "Attendance Engine API",
            "description": "Check-in by face, WiFi/GPS geofence or single-use QR token",
            "version": "1.0.0"
        },
        "servers": [
            {
                "url": "http://127.0.0.1:5000/api",
                "description": "Development server"
            }
        ],
        "security": [{"bearerAuth": []}],
        "components": {
            "securitySchemes": {
                "bearerAuth": {
                    "type": "http",
                    "scheme": "bearer",
                    "bearerFormat": "JWT"
                }
            },
            "schemas": {
                "AttendanceRecord": {
                    "type": "object",
                    "properties": {
                        "id": {"type": "integer"},
                        "participant_id": {"type": "integer"},
                        "session_id": {"type": "integer"},
                        "date": {"type": "string", "format": "date"},
                        "check_in_time": {"type": "string", "format": "date-time"},
                        "method": {"type": "string", "example": "FACE+WIFI"},
                        "status": {"type": "string", "enum": ["PRESENT", "LATE"]},
                        "confidence": {"type": "number", "nullable": True},
                        "verification": {"type": "object"},
                        "qr_token": {"type": "string", "nullable": True}
                    }
                },
                "QRSession": {
                    "type": "object",
                    "properties": {
                        "token": {"type": "string"},
                        "expiresAt": {"type": "string", "format": "date-time"},
                        "expiresIn": {"type": "integer"},
                        "sessionId": {"type": "integer"},
                        "qrImage": {"type": "string", "description": "Base64 encoded PNG"}
                    }
                },
                "Error": {
                    "type": "object",
                    "properties": {
                        "error": {"type": "boolean"},
                        "message": {"type": "string"},
                        "status_code": {"type": "integer"},
                        "kind": {"type": "string"},
                        "confidence": {"type": "number"}
                    }
                }
            }
        },
        "paths": {
            "/attendance/check-in": {
                "post": {
                    "tags": ["Attendance"],
                    "summary": "Check in to a session",
                    "requestBody": _json_body({
                        "type": "object",
                        "required": ["method"],
                        "properties": {
                            "sessionId": {"type": "integer"},
                            "method": {"type": "string", "enum": ["FACE", "WIFI", "QR", "FACE+WIFI"]},
                            "faceSample": {"type": "array", "items": {"type": "number"}},
                            "observedSSID": {"type": "string"},
                            "coordinates": {
                                "type": "object",
                                "properties": {
                                    "latitude": {"type": "number"},
                                    "longitude": {"type": "number"}
                                }
                            },
                            "qrToken": {"type": "string"}
                        }
                    }),
                    "responses": _responses("#/components/schemas/AttendanceRecord", 400, 401, 403, 404, 409, 503)
                }
            },
            "/qr/issue": {
                "post": {
                    "tags": ["QR Codes"],
                    "summary": "Issue a single-use QR token",
                    "requestBody": _json_body({
                        "type": "object",
                        "required": ["sessionId"],
                        "properties": {
                            "sessionId": {"type": "integer"},
                            "ttlSeconds": {"type": "integer", "minimum": 60, "maximum": 3600}
                        }
                    }),
                    "responses": _responses("#/components/schemas/QRSession", 400, 401, 403, 404)
                }
            },
            "/qr/redeem": {
                "post": {
                    "tags": ["QR Codes"],
                    "summary": "Redeem a QR token",
                    "requestBody": _json_body({
                        "type": "object",
                        "required": ["token"],
                        "properties": {"token": {"type": "string"}}
                    }),
                    "responses": _responses("#/components/schemas/AttendanceRecord", 400, 401, 403, 404, 409)
                }
            }
        },
        "tags": [
            {"name": "Attendance", "description": "Check-in"},
            {"name": "QR Codes", "description": "QR token issuance and redemption"}
        ]
    }
