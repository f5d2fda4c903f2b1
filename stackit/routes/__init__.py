# Routes package init
"""
StackIt Backend — API Routes Package
======================================

Route Inventory:
    - questions.py: GET    /api/questions                 (list, sort, filter, search)
                    POST   /api/questions                 (ask a question)
                    GET    /api/questions/{id}            (detail)
                    DELETE /api/questions/{id}            (owner delete)
                    POST   /api/questions/{id}/views      (register a view)
                    POST   /api/questions/{id}/vote       (vote on the question)
                    GET    /api/questions/{id}/answers    (answers, newest first)
                    POST   /api/questions/{id}/answers    (post an answer)
    - answers.py:   POST   /api/answers/{id}/vote         (vote on an answer)
                    POST   /api/answers/{id}/accept       (question owner accepts)
                    DELETE /api/answers/{id}              (owner delete)
    - profiles.py:  GET    /api/profiles/me               (current user, navbar)
                    PATCH  /api/profiles/me               (edit own profile)
                    GET    /api/profiles/{id}             (public profile)
    - tags.py:      GET    /api/tags/suggested            (tag suggestions)
    - health.py:    GET    /health                        (service health check)

Design Principle:
    Routes are THIN: extract request data, resolve identity, call a service,
    set status code and headers. Forum rules live in services.
"""
