"""
DevCamper Backend — API Routes Package
========================================

Route Inventory (all under /api/v1 except health):
    - bootcamps.py:  /bootcamps, radius search, photo upload, nested
                     /bootcamps/{id}/courses and /bootcamps/{id}/reviews
    - courses.py:    /courses
    - reviews.py:    /reviews
    - auth.py:       /auth/*
    - users.py:      /users (admin)
    - health.py:     GET /health

Routes stay thin: resolve the caller, call one service method, and hand the
Result to devcamper.responses.render().
"""
