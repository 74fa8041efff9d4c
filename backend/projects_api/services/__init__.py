# Services package init
"""
Projects API — Services Layer
===============================

What:  Business logic between routes (HTTP) and the stored procedures.

Service Inventory:
    - procedures:            ProcedureClient, the one gateway to the database
    - result_tree:           turns flat result sets into nested documents
    - menu_service, authorization_service, user_service,
      presales_service, development_service, auth_service: one per resource
    - email_service:         OTP email over SMTP with retries
    - token_service:         signed login tokens
    - error_log:             server-error rows written after the response
"""
