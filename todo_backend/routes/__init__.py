"""
Todo Backend — API Routes Package
===================================

Route Inventory:
    - auth.py:    POST /login     (login-or-register, returns session token)
    - todos.py:   GET  /todos     (list the session user's todos)
                  POST /todos     (create a todo for the session user)
    - auth.py, todos.py: OPTIONS answered with an empty 200
    - health.py:  GET  /health    (service health check)

Routes stay thin: they parse the request, call a service obtained through
todo_backend.dependencies, and return a schema. Errors are raised as
application exceptions and formatted by the global handlers in main.py.
"""
