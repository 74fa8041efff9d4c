# Routes package init
"""
Projects API — Routes Package
===============================

What:  HTTP route handlers that accept requests and return envelopes.

Route Inventory:
    - login.py:           /api/login          (OTP request and verification)
    - menus.py:           /api/menu           (menu tree and menu admin)
    - authorizations.py:  /api/authorization  (role/menu permissions)
    - users.py:           /api/user
    - roles.py:           /api/userrole
    - presales.py:        /api/presales       (leads, history, advance payments)
    - development.py:     /api/development    (confirmed projects, work status)
    - attachments.py:     /api/attachment
    - health.py:          GET /health

Routes stay thin: parse the request, call one service method, wrap the
result. Procedure calls and tree assembly live in services.
"""
