# Schemas package init
"""
Projects API — Request/Response Schemas
=========================================

What:  Pydantic models defining the JSON contract of every endpoint.
How:   All schemas derive from CamelModel (schemas/common.py): snake_case
       fields, camelCase JSON, unknown procedure columns ignored.

Modules:
    - common.py:         CamelModel, Envelope, ErrorResponse, HealthResponse
    - auth.py:           OTP login
    - menu.py:           menus and the two-level menu tree
    - authorization.py:  role/menu permissions
    - user.py:           users and roles
    - presales.py:       projects, pre-sales detail, advance payments
    - development.py:    serial numbers, work status, status master
"""
