"""
StackIt Backend — Services Layer
==================================

What:  Business logic layer sitting between routes (HTTP) and database (persistence).
How:   Services take a session plus validated payloads, apply the forum's
       rules, and return response schemas. Routes stay thin.

Service Inventory:
    - IdentityProvider (abstract): Turns a bearer token into an Identity
    - JWTIdentityProvider: Verifies HS256 access tokens with python-jose
    - ProfileService: Profile auto-creation, lookup and updates
    - QuestionService: Listing, asking, viewing, voting, deleting questions
    - AnswerService: Posting, voting, accepting, deleting answers
    - tags: Tag normalization rules and the suggested tag list
"""
