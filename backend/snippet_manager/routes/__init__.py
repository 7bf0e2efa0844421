"""
Snippet Manager Backend: API Routes Package
===========================================

Route Inventory:
    - auth.py:      POST /register, POST /login                        (public)
    - snippets.py:  GET/POST /snippets, GET/PUT/DELETE /snippets/{id}  (bearer)
    - tags.py:      GET /tags/{snippet_id},
                    POST/DELETE /tags/{snippet_id}/{tag_name}          (bearer)
    - folders.py:   POST /folders, GET /folders?id=,
                    GET /folders/user/{user_id}, DELETE /folders/{id}  (bearer)
    - health.py:    GET /health                                        (public)

Routes stay thin: parse the request, call exactly one service or store
operation, pick the status code. Errors propagate as exceptions to the
handlers registered in main.py.
"""
