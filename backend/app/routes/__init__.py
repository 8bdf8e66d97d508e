"""
Todo Cards Backend — API Routes Package
=========================================

Route Inventory:
    - users.py:   POST /user/register, POST /auth/login, POST /auth/logout
    - cards.py:   GET/POST/PUT /card, DELETE /card/{activities_no}
    - health.py:  GET  /health
    - deps.py:    bearer-token dependency shared by protected routes

Routes are thin: extract data from the request, call a service, shape the
response. Business rules live in app.services.
"""
